"""
Login helper shared by every scenario that needs to authenticate.

Performs the sign-in procedure only; callers assert on the outcome.
"""

from .action_driver import ActionDriver
from .dom_contract import SIGNIN_PATH, SIGNIN_USERNAME, SIGNIN_PASSWORD, SIGNIN_REMEMBER, SIGNIN_SUBMIT
from .models import Credentials


async def login(driver: ActionDriver, username: str, password: str, remember: bool = False):
    """
    Sign in through the sign-in form.

    Args:
        driver: ActionDriver for the scenario's page
        username: Username to enter
        password: Password to enter
        remember: Tick "remember me" before submitting
    """
    await driver.navigate(SIGNIN_PATH)
    await driver.fill_field(SIGNIN_USERNAME, username)
    await driver.fill_field(SIGNIN_PASSWORD, password)
    if remember:
        await driver.set_checkbox(SIGNIN_REMEMBER, True)
    await driver.submit(SIGNIN_SUBMIT)


async def login_with(driver: ActionDriver, credentials: Credentials, remember: bool = False):
    """Sign in with a Credentials model."""
    await login(driver, credentials.username, credentials.password, remember=remember)
