"""
Helper script for getting a Firebase ID token for a test phone user.

Needs the service account file the server uses and the project's Web API key:

.. code-block:: bash

   $ FIREBASE_API_KEY=... python generate_token.py
   Phone number (E.164): +17206453833
   Verification code [123456]:

   eyJhbGciOiJSUzI1NiIsImtpZCI6...

Send it as ``Authorization: Bearer <token>`` to the ``/api`` routes.
"""
import logging

import click

from locationshare.config import get_settings
from locationshare.tokens import TokenIssueError, TokenIssuer


@click.command()
@click.option('--phone', prompt='Phone number (E.164)')
@click.option('--code', prompt='Verification code', default='123456')
@click.option('--verbose', is_flag=True, default=False)
def generate_token(phone: str, code: str, verbose: bool) -> None:
    """Print an ID token for the user owning PHONE."""
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    settings = get_settings()
    try:
        issuer = TokenIssuer.from_service_account_file(
            settings.firebase_credentials, settings.firebase_api_key
        )
        token = issuer.issue_phone_token(phone, code)
    except TokenIssueError as ex:
        raise click.ClickException(str(ex)) from ex
    click.echo(token)


if __name__ == '__main__':
    generate_token()
