"""ACL policy operator."""

from __future__ import annotations

from ..utils.errors import NotFoundError
from .base import BaseOperator

RULE_SEPARATOR = "\r\n"


def build_policy_document(rules: list[str]) -> str:
    return RULE_SEPARATOR.join(rules)


class PolicyOperator(BaseOperator):
    """Write and delete ACL policies. Writes always overwrite."""

    family = "policy"

    def create_or_update(self, name: str, rules: list[str], token: str) -> None:
        with self.track("create_or_update"):
            self.provider.write_acl_policy(name, build_policy_document(rules), token)
        self.logger.info(f"Wrote ACL policy {name} with {len(rules)} rules")

    def delete(self, name: str, token: str) -> None:
        with self.track("delete"):
            try:
                self.provider.delete_acl_policy(name, token)
            except NotFoundError:
                self.logger.debug(f"ACL policy {name} already absent")
                return
        self.logger.info(f"Deleted ACL policy {name}")
