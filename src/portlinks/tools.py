
# Imports from standard library
import logging
import os
import shlex
import subprocess
from typing import Callable

from .bases import PortlinksError

_logger = logging.getLogger(__name__)

CommandRunner = Callable[[list[str]], subprocess.CompletedProcess]


class CommandError(PortlinksError):
    def __init__(self, args: list[str], message: str, returncode=-1):
        super().__init__(message)
        self.cmd_args = args
        self.returncode = returncode
        self.message = message

    def __str__(self) -> str:
        return self.message


def executable(env_var: str, default: str) -> str:
    'executable name, can be overridden with an environment variable'
    return os.getenv(env_var) or default

def run_command(args: list[str]) -> subprocess.CompletedProcess:
    _logger.debug(f'run: {shlex.join(args)}')
    return subprocess.run(args, capture_output=True, text=True,
                          errors='replace')

def checked_output(runner: CommandRunner, args: list[str]) -> str:
    '''run command `args` with `runner` and return its stdout.
    Raise CommandError if the command is missing or fails.'''
    try:
        proc = runner(args)
    except FileNotFoundError:
        raise CommandError(args, f"command '{args[0]}' not found")
    except OSError as e:
        raise CommandError(args, f"unable to run '{args[0]}': {e}")

    if proc.returncode != 0:
        raise CommandError(
            args, error_message(args, proc), proc.returncode)

    return proc.stdout or ''

def error_message(
        args: list[str], proc: subprocess.CompletedProcess) -> str:
    '''first not empty line of stderr (or stdout),
    or the exit status if the command printed nothing.'''
    for stream in (proc.stderr, proc.stdout):
        if not stream:
            continue
        for line in stream.splitlines():
            if line.strip():
                return line.strip()

    return f"'{shlex.join(args)}' exited with status {proc.returncode}"
