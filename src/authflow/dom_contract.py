"""
DOM contract of the application under test.

Every selector, role/name pair, path and literal message the scenarios rely
on lives here. A scenario failing because one of these no longer resolves is
an interface break on the application side, so changes to this module bump
DOM_CONTRACT_VERSION.
"""

from .models import Target

DOM_CONTRACT_VERSION = "1.0"

# Application paths
SIGNIN_PATH = "/signin"
SIGNUP_PATH = "/signup"
HOME_PATH = "/"
PROTECTED_PATH = "/personal"

SIGNIN_ERROR_TEXT = "Username or password is invalid"

# Sign-in form
SIGNIN_USERNAME = Target.css('input[name="username"]')
SIGNIN_PASSWORD = Target.css('input[name="password"]')
SIGNIN_REMEMBER = Target.css('input[name="remember"]')
SIGNIN_SUBMIT = Target.css('button[type="submit"]')
SIGNIN_SUBMIT_BUTTON = Target.test_id("signin-submit")
SIGNIN_ERROR = Target.test_id("signin-error")
SIGNIN_USERNAME_TEXTBOX = Target.by_role("textbox", "Username")
SIGNIN_PASSWORD_TEXTBOX = Target.by_role("textbox", "Password")

# Sign-up form
SIGNUP_LINK = Target.test_id("signup")
SIGNUP_FIRST_NAME = Target.by_role("textbox", "First Name")
SIGNUP_LAST_NAME = Target.by_role("textbox", "Last Name")
SIGNUP_USERNAME = Target.by_role("textbox", "Username")
SIGNUP_PASSWORD = Target.by_role("textbox", "Password", within=Target.test_id("signup-password"))
SIGNUP_CONFIRM_PASSWORD = Target.by_role("textbox", "Confirm Password")
SIGNUP_SUBMIT = Target.test_id("signup-submit")

# Navigation
SIDENAV_SIGNOUT = Target.test_id("sidenav-signout")

# Onboarding
ONBOARDING_DIALOG = Target.test_id("user-onboarding-dialog")
ONBOARDING_NEXT = Target.test_id("user-onboarding-next")
BANK_NAME = Target.by_role("textbox", "Bank Name")
BANK_ROUTING_NUMBER = Target.by_role("textbox", "Routing Number")
BANK_ACCOUNT_NUMBER = Target.by_role("textbox", "Account Number")
BANK_SUBMIT = Target.test_id("bankaccount-submit")

# Sign-up inputs keyed by form field name (the helper text id prefix)
SIGNUP_FIELDS = {
    "firstName": SIGNUP_FIRST_NAME,
    "lastName": SIGNUP_LAST_NAME,
    "username": SIGNUP_USERNAME,
    "password": SIGNUP_PASSWORD,
    "confirmPassword": SIGNUP_CONFIRM_PASSWORD,
}


def helper_text(field: str) -> Target:
    """
    Validation helper text rendered under a form field.

    Args:
        field: Form field name (e.g., "username", "confirmPassword")

    Returns:
        Target for ``#<field>-helper-text``
    """
    return Target.css(f"#{field}-helper-text")
