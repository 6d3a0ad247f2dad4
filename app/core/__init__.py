"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the payments, orders and audit apps.
No payment or provisioning logic lives here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - AuthenticationError: Inbound request failed authentication
    - ValidationError: Input validation failures
    - NotFoundError: Resource not found
    - ConflictError: Operation not allowed in current state
    - ExternalServiceError: Third-party service failures

Views (import from core.views):
    - health_check: Database and cache check
"""
