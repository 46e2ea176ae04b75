"""
User Provisioning

Privileged creation of an operator: an auth identity plus its profile row.
If the profile insert fails the identity is deleted again, so from the
caller's side either both exist or neither does.
"""

import logging
from datetime import datetime, timezone

from .exceptions import ExternalFailure
from .models import UserProvisioningRequest
from .validators import InputValidator

logger = logging.getLogger(__name__)


class UserProvisioner:
    """Creates users through a backend client holding the service-role key."""

    def __init__(self, client, validator: InputValidator | None = None):
        self.client = client
        self.validator = validator or InputValidator()

    def provision(self, request: UserProvisioningRequest, now: datetime | None = None) -> dict:
        self.validator.validate_user(request, is_new=True)

        user = self.client.create_auth_user(request.email, request.password, request.metadata)
        user_id = (user or {}).get("id")
        if not user_id:
            raise ExternalFailure("Auth backend did not return the created user")
        logger.info(f"Auth identity created for {request.username}: {user_id}")

        profile = {
            "id": user_id,
            "user_id": user_id,
            "nome": request.display_name,
            "email": request.email,
            "username": request.username,
            "role": request.role.value,
            "gerencia_id": request.management_unit_id,
            "setor_id": request.sector_id,
            "created_at": (now or datetime.now(timezone.utc)).isoformat(),
        }

        try:
            self.client.insert("profiles", profile)
        except ExternalFailure as e:
            logger.error(f"Profile insert failed for {request.username}, rolling back identity {user_id}")
            try:
                self.client.delete_auth_user(user_id)
            except ExternalFailure as rollback_error:
                logger.error(
                    f"Rollback failed, identity {user_id} may be orphaned: {rollback_error.message}"
                )
            raise ExternalFailure(f"Failed to save profile: {e.message}", e.status_code) from e

        logger.info(f"Profile saved for {request.username}")
        return {"user": user, "message": "User created successfully"}

    def provision_from_dict(self, data: dict) -> dict:
        return self.provision(UserProvisioningRequest.from_dict(data))
