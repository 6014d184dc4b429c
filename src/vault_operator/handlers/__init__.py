"""Handler modules for CRD resources."""

# Import handlers to register them - all handlers register themselves via @kopf decorators
from . import approle  # noqa: F401
from . import auth_method  # noqa: F401
from . import policy  # noqa: F401
from . import secret  # noqa: F401
from . import user_pass  # noqa: F401
from . import vault_server  # noqa: F401
