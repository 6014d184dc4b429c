"""AppRole operator."""

from __future__ import annotations

from ..utils.errors import NotFoundError
from .base import BaseOperator


class AppRoleOperator(BaseOperator):
    """Manage AppRole roles and their credentials."""

    family = "approle"

    def create_or_update(
        self,
        mount_path: str,
        role_name: str,
        secret_id_ttl: int,
        policies: list[str],
        token: str,
    ) -> None:
        """Write the role configuration; repeated writes converge on the same role."""
        with self.track("create_or_update"):
            self.provider.write_approle_role(mount_path, role_name, policies, str(secret_id_ttl), token)
        self.logger.info(f"Wrote AppRole {role_name} under {mount_path}")

    def get_role_id(self, mount_path: str, role_name: str, token: str) -> str:
        with self.track("get_role_id"):
            return self.provider.read_approle_role_id(mount_path, role_name, token)

    def generate_secret_id(self, mount_path: str, role_name: str, token: str) -> str:
        """Mint a new secret-id for the role."""
        with self.track("generate_secret_id"):
            return self.provider.generate_approle_secret_id(mount_path, role_name, token)

    def is_approle_created(self, mount_path: str, role_name: str, token: str) -> bool:
        with self.track("is_approle_created"):
            try:
                self.provider.read_approle_role_id(mount_path, role_name, token)
            except NotFoundError as e:
                if e.status_code == 404:
                    return False
                raise
        return True

    def delete_approle(self, mount_path: str, role_name: str, token: str) -> None:
        with self.track("delete_approle"):
            try:
                self.provider.delete_approle_role(mount_path, role_name, token)
            except NotFoundError:
                self.logger.debug(f"AppRole {role_name} already absent from {mount_path}")
                return
        self.logger.info(f"Deleted AppRole {role_name} from {mount_path}")
