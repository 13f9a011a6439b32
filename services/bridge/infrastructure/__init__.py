# Infrastructure Layer
from .uow import (
    UnitOfWork,
    ShelfChangeRepository,
    ThreadContinuityRepository,
    create_uow_provider,
    translate_store_error
)
