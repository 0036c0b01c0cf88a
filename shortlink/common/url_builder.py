"""URL building utilities for the shortlink service."""


def build_short_url(short_code: str, base_url: str) -> str:
    """Build complete short URL.

    Args:
        short_code: The short code
        base_url: Base URL (e.g., https://example.com)

    Returns:
        Complete short URL
    """
    return f"{base_url.rstrip('/')}/{short_code}"


def build_client_link(client_url: str, path: str, token: str) -> str:
    """Build a link into the client app carrying a token.

    Example: build_client_link("https://app.example", "activation", tok)
    gives "https://app.example/activation/<tok>".
    """
    return f"{client_url.rstrip('/')}/{path.strip('/')}/{token}"
