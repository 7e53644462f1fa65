"""idpbridge - one interface over many OAuth1/OAuth2 identity providers.

Every provider exposes the same lifecycle:

1. ``session = await provider.begin_auth(state)`` and redirect the user to
   ``session.get_auth_url()``.
2. Persist ``session.marshal()`` between the redirect and the callback.
3. On callback, ``session = provider.unmarshal_session(data)`` and
   ``await session.authorize(provider, params)``.
4. ``user = await provider.fetch_user(session)`` returns a normalized
   :class:`User` (the provider's payload stays available in ``raw_data``).

## Quick Start

```python
from idpbridge import use_providers, get_provider
from idpbridge.providers import GitHubProvider

use_providers(GitHubProvider("client-id", "secret", "https://app/auth/github/callback", "user:email"))

provider = get_provider("github")
session = await provider.begin_auth("state-token")
```

Web applications can use :class:`idpbridge.web.AuthFlow` instead of driving
the lifecycle by hand.
"""

from .contracts import (
    NO_AUTH_URL_ERROR_MESSAGE,
    Provider,
    ProviderError,
    Session,
    Token,
    User,
)
from .oauth1 import OAuth1Provider, OAuth1Session
from .oauth2 import OAuth2Config, OAuth2Endpoint, OAuth2Provider, OAuth2Session
from .registry import (
    ProviderResolver,
    clear_providers,
    delete_provider,
    get_provider,
    get_providers,
    set_provider_resolver,
    use_providers,
)

__version__ = "0.1.0"

__all__ = [
    "NO_AUTH_URL_ERROR_MESSAGE",
    "OAuth1Provider",
    "OAuth1Session",
    "OAuth2Config",
    "OAuth2Endpoint",
    "OAuth2Provider",
    "OAuth2Session",
    "Provider",
    "ProviderError",
    "ProviderResolver",
    "Session",
    "Token",
    "User",
    "clear_providers",
    "delete_provider",
    "get_provider",
    "get_providers",
    "set_provider_resolver",
    "use_providers",
]
