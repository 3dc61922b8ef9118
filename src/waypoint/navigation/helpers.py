"""Common navigation patterns built on the controller's public API.

Plain functions taking the controller explicitly; there is no global
navigator to look up.
"""

from typing import Any

from waypoint.navigation.controller import NavigationController
from waypoint.navigation.state import ResultSlot
from waypoint.routes import HOME, LOGIN


async def navigate_and_clear_stack(
    nav: NavigationController,
    location: str,
    extra: Any = None,
) -> ResultSlot:
    """Replace the current screen and drop everything below it.

    Used for flows like logout or session expiry where going back must
    not be possible.
    """
    slot = await nav.replace_to(location, extra)
    if not slot.cancelled:
        nav.clear_history()
    return slot


async def handle_session_expiration(
    nav: NavigationController,
    login_location: str = LOGIN,
) -> ResultSlot:
    """Send the user to the login screen with no way back."""
    return await navigate_and_clear_stack(nav, login_location)


def navigate_home(nav: NavigationController, home: str = HOME) -> None:
    """Pop back to the home screen from any depth.

    If home is not on the stack, this pops down to the root entry.
    """
    nav.pop_until(home)


async def back_or_home(nav: NavigationController, home: str = HOME) -> None:
    """Go back if possible, otherwise navigate to the home screen."""
    if nav.can_pop:
        nav.pop()
        return
    await nav.navigate_to(home)
