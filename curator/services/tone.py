"""
Tone profile: the user's own writing voice for "custom" tone posts.
"""

from typing import Optional

from curator.models import ToneProfile

TONE_STYLES = ('formal', 'casual', 'sarcastic', 'technical')


def get_tone_profile(session, user_id: str) -> Optional[ToneProfile]:
    return session.query(ToneProfile).filter(ToneProfile.user_id == user_id).first()


def save_tone_profile(
    session,
    user_id: str,
    name: str,
    style: str,
    description: str = '',
    keywords: Optional[list[str]] = None,
) -> ToneProfile:
    """
    Create or replace the user's tone profile.

    Raises:
        ValueError: missing name or unknown style
    """
    name = name.strip() if isinstance(name, str) else ''
    if not name:
        raise ValueError("Tone name is required")
    if style not in TONE_STYLES:
        raise ValueError(f"Style must be one of: {', '.join(TONE_STYLES)}")

    profile = get_tone_profile(session, user_id)
    if profile is None:
        profile = ToneProfile(user_id=user_id)
        session.add(profile)
    profile.name = name[:200]
    profile.style = style
    profile.description = description or ''
    profile.keywords = [str(k).strip() for k in (keywords or []) if str(k).strip()]
    session.commit()
    return profile
