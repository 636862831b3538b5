import requests

from ..errors import TransportError


def download_bytes(sess, url) -> bytes:
    try:
        r = sess.get(url)
        r.raise_for_status()
        return r.content
    except requests.RequestException as e:
        raise TransportError(f"Failed to download {url}: {e}") from e
