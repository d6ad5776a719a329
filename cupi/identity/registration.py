"""Promote a Discord identity to a registered user."""

import logging
from typing import Optional

import psycopg

from cupi.db import users as users_db
from cupi.integrations.discord.models import DiscordUser
from cupi.models.results import RegistrationResult
from cupi.models.user import User

logger = logging.getLogger(__name__)


class RegistrationRaceError(Exception):
    """A concurrent registration won the insert but its row cannot be found."""


def register(
    discord_user: Optional[DiscordUser],
    submitted_name: Optional[str],
    skills: Optional[list[str]] = None,
    interests: Optional[str] = None,
) -> RegistrationResult:
    """Complete onboarding for the Discord identity in the session.

    An existing user matching the identity (by Discord id, shared email, or
    placeholder email) is updated in place; its role and workspace are kept.
    Otherwise a new onboarded user is created, and it becomes Admin only if
    it is the first user in the system. Calling this again for the same
    identity updates the same user.

    Setting the session cookie and sending the "user joined" notification are
    left to the caller.
    """
    if discord_user is None:
        return RegistrationResult.failure("unauthenticated", "Not authenticated")

    name = (submitted_name or "").strip()
    if not name:
        return RegistrationResult.failure("invalid_input", "Name is required")

    cleaned_skills = _clean_skills(skills)
    cleaned_interests = interests.strip() if interests and interests.strip() else None

    try:
        existing = users_db.find_user_for_discord_identity(
            discord_user.id, discord_user.email
        )
        if existing is not None:
            user = _complete_onboarding(
                existing, discord_user, name, cleaned_skills, cleaned_interests
            )
            newly_onboarded = not existing.onboarded
        else:
            user = _create_onboarded_user(
                discord_user, name, cleaned_skills, cleaned_interests
            )
            newly_onboarded = True
    except (psycopg.Error, RegistrationRaceError):
        logger.exception(f"Registration failed for discord_id={discord_user.id}")
        return RegistrationResult.failure(
            "persistence_failure", "Failed to create account"
        )

    if user is None:
        return RegistrationResult.failure(
            "persistence_failure", "Account disappeared during registration"
        )

    logger.info(f"Registered user id={user.id} for discord_id={discord_user.id}")
    return RegistrationResult(
        success=True, user_id=user.id, newly_onboarded=newly_onboarded
    )


def link_discord_identity(
    discord_user: DiscordUser, preferred_name: Optional[str] = None
) -> User:
    """Find or eagerly create the user for a Discord login.

    Runs at OAuth callback time. An existing user gets its Discord id and
    avatar refreshed. A new user is created without onboarding; the first
    user in the system is still made Admin.

    Raises:
        psycopg.Error: If the store fails.
        RegistrationRaceError: If a concurrent create wins but cannot be read back.
    """
    existing = users_db.find_user_for_discord_identity(
        discord_user.id, discord_user.email
    )
    if existing is None:
        try:
            return users_db.create_user(
                discord_id=discord_user.id,
                email=discord_user.contact_email,
                name=preferred_name or discord_user.display_name,
                avatar=discord_user.avatar_url,
            )
        except users_db.UserConflictError:
            logger.warning(
                f"Concurrent login created discord_id={discord_user.id}, reusing it"
            )
            existing = _find_after_conflict(discord_user)

    users_db.refresh_discord_link(existing.id, discord_user.id, discord_user.avatar_url)
    return existing


def _create_onboarded_user(
    discord_user: DiscordUser,
    name: str,
    skills: list[str],
    interests: Optional[str],
) -> Optional[User]:
    try:
        return users_db.create_user(
            discord_id=discord_user.id,
            email=discord_user.contact_email,
            name=name,
            avatar=discord_user.avatar_url,
            onboarded=True,
            skills=skills,
            interests=interests,
        )
    except users_db.UserConflictError:
        # A duplicate submit committed first; finish as an update of its row.
        logger.warning(
            f"Concurrent registration for discord_id={discord_user.id}, retrying as update"
        )
        existing = _find_after_conflict(discord_user)
        return _complete_onboarding(existing, discord_user, name, skills, interests)


def _complete_onboarding(
    user: User,
    discord_user: DiscordUser,
    name: str,
    skills: list[str],
    interests: Optional[str],
) -> Optional[User]:
    return users_db.complete_onboarding(
        user.id, discord_user.id, name, skills, interests
    )


def _find_after_conflict(discord_user: DiscordUser) -> User:
    existing = users_db.find_user_for_discord_identity(
        discord_user.id, discord_user.email
    )
    if existing is None:
        raise RegistrationRaceError(
            f"User for discord_id={discord_user.id} conflicted but was not found"
        )
    return existing


def _clean_skills(skills: Optional[list[str]]) -> list[str]:
    """Trim skill tags, dropping blanks and duplicates but keeping order."""
    cleaned: list[str] = []
    for skill in skills or []:
        tag = skill.strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned
