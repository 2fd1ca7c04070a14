from typing import Any, Dict, Optional

from fireshop.tree import Tree, join

ADMINS_ROOT = "admins"


def hash_code(text: str) -> int:
    """32-bit string hash the storefront uses to key admin invitations by email."""
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def lookup_admin(tree: Tree, uid: str, email: Optional[str]) -> Optional[Dict[str, Any]]:
    """Return the admin profile for an account, ``None`` if it is not an admin.

    Admins are invited by email hash and later keyed by uid, so both entries
    are read: the hashed entry gates access, the uid entry carries the role.
    """
    if not email:
        return None
    invitation = tree.get(join(ADMINS_ROOT, str(hash_code(email))))
    if not isinstance(invitation, dict) or not invitation.get("email"):
        return None

    profile = tree.get(join(ADMINS_ROOT, uid))
    profile = profile if isinstance(profile, dict) else {}
    return {
        "uid": uid,
        "email": invitation["email"],
        "role": profile.get("role", invitation.get("role")),
        "active": profile.get("active", invitation.get("active", False)),
    }
