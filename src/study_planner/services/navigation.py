"""Sidebar and navbar configuration."""

from dataclasses import dataclass
from enum import Enum

from study_planner.domain.sessions import Identity, SessionState


@dataclass(frozen=True)
class NavLink:
    """Declarative sidebar entry."""

    name: str
    href: str


class NavigationItem(Enum):
    """Sidebar entries in display order."""

    DASHBOARD = NavLink("Dashboard", "/dashboard")
    SCHEDULES = NavLink("My Schedules", "/schedules")
    UPLOAD = NavLink("Upload Resources", "/upload")
    PROFILE = NavLink("Profile", "/profile")


@dataclass(frozen=True)
class SidebarEntry:
    link: NavLink
    active: bool


def sidebar_entries(current_path: str) -> list[SidebarEntry]:
    """Return sidebar links, marking the one that matches the current path."""
    return [
        SidebarEntry(link=item.value, active=item.value.href == current_path)
        for item in NavigationItem
    ]


def navbar_identity(session: SessionState) -> Identity | None:
    """Return the identity shown in the navbar, if signed in."""
    if not session.is_authenticated:
        return None
    return session.identity
