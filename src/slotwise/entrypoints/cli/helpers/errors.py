"""Translation of application errors into CLI exits."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import click

from slotwise.config import (
    DatabaseUrlNotSetError,
    InvalidSettingError,
    PayoutProviderNotConfiguredError,
)
from slotwise.domain.errors import DomainError
from slotwise.interfaces.errors import StoreError

# exit codes
EXIT_REJECTED = 1
EXIT_CONFIG = 2
EXIT_STORE = 3


class CommandFailed(click.ClickException):
    """ClickException with a chosen exit code."""

    def __init__(self, message: str, exit_code: int) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@contextmanager
def reported_errors() -> Iterator[None]:
    """Turn configuration, business and store errors into clean CLI failures."""
    try:
        yield
    except DatabaseUrlNotSetError as e:
        raise CommandFailed("SLOTWISE_DB_URL is not set.", EXIT_CONFIG) from e
    except (InvalidSettingError, PayoutProviderNotConfiguredError) as e:
        raise CommandFailed(str(e), EXIT_CONFIG) from e
    except DomainError as e:
        raise CommandFailed(str(e), EXIT_REJECTED) from e
    except StoreError as e:
        raise CommandFailed(f"Database error: {e}", EXIT_STORE) from e
