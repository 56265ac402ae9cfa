"""AuthN/AuthZ helpers for gradarchive.

Credential scheme
-----------------
``Authorization: Bearer <jwt>``
   HS256-signed JWT issued at login, refresh and user creation.
   Claims: ``username``, ``iat``, ``exp``.

Gates
-----
``authenticate``  verifies signature and expiry (401 on failure).
``authorize``     looks up a stored (user, doc_type, permission_type) grant
                  (403 when there is none).
"""

from gradarchive.auth.deps import authenticate, bearer_token
from gradarchive.auth.permissions import authorize, has_grant

__all__ = ["authenticate", "authorize", "bearer_token", "has_grant"]
