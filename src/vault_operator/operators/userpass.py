"""Username/password account operator."""

from __future__ import annotations

from ..utils.errors import NotFoundError
from .base import BaseOperator


class UserPassOperator(BaseOperator):
    """Create-once userpass accounts.

    Password and policies are only applied when the account is created.
    """

    family = "userpass"

    def is_user_created(self, mount_path: str, username: str, token: str) -> bool:
        """Check whether username exists under the mount.

        A 404 carrying no error details means the listing is empty (or the
        mount does not exist yet); any other not-found is an error.
        """
        with self.track("is_user_created"):
            try:
                users = self.provider.list_userpass_users(mount_path, token)
            except NotFoundError as e:
                if e.status_code == 404 and not e.errors:
                    return False
                raise
        return username in users

    def create_user(
        self,
        mount_path: str,
        username: str,
        password: str,
        policies: list[str],
        token: str,
    ) -> bool:
        """Create the account if absent.

        Returns:
            True if the account was created by this call
        """
        if self.is_user_created(mount_path, username, token):
            self.logger.debug(f"User {username} already exists under {mount_path}")
            return False
        with self.track("create_user"):
            self.provider.write_userpass_user(mount_path, username, password, policies, token)
        self.logger.info(f"Created user {username} under {mount_path}")
        return True

    def delete_user(self, mount_path: str, username: str, token: str) -> None:
        with self.track("delete_user"):
            try:
                self.provider.delete_userpass_user(mount_path, username, token)
            except NotFoundError:
                self.logger.debug(f"User {username} already absent from {mount_path}")
                return
        self.logger.info(f"Deleted user {username} from {mount_path}")
