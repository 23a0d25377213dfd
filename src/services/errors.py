"""Error taxonomy shared by the pipelines and the HTTP layer."""


class ReelsmithError(Exception):
    """Base class for all expected reelsmith failures."""


class ValidationError(ReelsmithError):
    """Required input is missing or malformed. Raised before any state changes."""


class NotFoundOrUnauthorized(ReelsmithError):
    """The entity does not exist or belongs to someone else.

    Both cases map to the same 404, so other users' ids are not revealed.
    """

    def __init__(self, entity: str, entity_id: str | None = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class PreconditionError(ReelsmithError):
    """The entity is in the wrong lifecycle state for the operation."""


class ProviderError(ReelsmithError):
    """A stock media or speech-to-text provider failed or is not configured."""


class PipelineFatal(ReelsmithError):
    """An unexpected failure inside a background pipeline stage."""

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} failed: {cause}")
