# plugins/twitter/auth/identity.py
"""
Twitter Identity Mapping
========================

Pure functions turning the raw Twitter profile into the normalized identity
the rest of the application consumes. Missing profile fields come through as
None; nothing here validates or fetches.
"""

import re
from typing import Any, Dict, Mapping, Optional

TWITTER_PROFILE_URL = "https://twitter.com/"

_SIZE_SUFFIX = re.compile(r"_normal(\.[A-Za-z0-9]+)?$")


def profile_url(username: Optional[str]) -> str:
    """Public profile URL for a username."""
    return f"{TWITTER_PROFILE_URL}{username if username is not None else ''}"


def normalize_identity(raw_profile: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Map a raw Twitter profile to the normalized identity.

    Args:
        raw_profile (Mapping[str, Any]): Profile fields as returned by Twitter

    Returns:
        Dict[str, Any]: nickname, name, email, location, description and urls
    """
    username = raw_profile.get("username")
    return {
        "nickname": username,
        "name": raw_profile.get("name"),
        "email": raw_profile.get("email"),
        "location": raw_profile.get("location"),
        "description": raw_profile.get("description"),
        "urls": {
            "Website": raw_profile.get("url"),
            "Twitter": profile_url(username),
        },
    }


def extra_info(raw_profile: Mapping[str, Any], skip_info: bool) -> Dict[str, Any]:
    """
    Build the extra section of the auth hash.

    When skip_info is set the raw_info key is left out entirely rather
    than set to None.
    """
    if skip_info:
        return {}
    return {"raw_info": raw_profile}


def image_url(raw_profile: Mapping[str, Any], image_size: Optional[str] = None,
              secure: bool = False) -> Optional[str]:
    """
    Get the avatar URL at the requested size.

    Twitter serves avatars as "<name>_normal.<ext>"; other sizes swap the
    suffix ("_mini", "_bigger") or drop it ("original").

    Args:
        raw_profile (Mapping[str, Any]): Profile fields as returned by Twitter
        image_size (Optional[str]): One of mini, normal, bigger, original
        secure (bool): Force an https URL

    Returns:
        Optional[str]: The image URL, or None if the profile has none
    """
    url = raw_profile.get("profile_image_url")
    if not url:
        return None
    if secure and url.startswith("http://"):
        url = "https://" + url[len("http://"):]
    if image_size == "original":
        url = _SIZE_SUFFIX.sub(lambda m: m.group(1) or "", url)
    elif image_size in ("mini", "bigger"):
        url = _SIZE_SUFFIX.sub(lambda m: f"_{image_size}{m.group(1) or ''}", url)
    return url
