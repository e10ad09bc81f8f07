import logging
import shlex
import subprocess

from kafka_tool.errors import CommandFailedError, ToolNotFoundError

logger = logging.getLogger(__name__)


class CommandRunner:
    """
    Runs external commands from explicit argument vectors.

    Output goes straight to the terminal unless ``capture`` is requested,
    in which case stdout is returned as text and stderr still reaches the
    terminal.
    """

    def run(self, argv, capture=False):
        argv = [str(arg) for arg in argv]
        logger.info(f"Running: {shlex.join(argv)}")
        try:
            result = subprocess.run(
                argv,
                stdout=subprocess.PIPE if capture else None,
                text=True,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ToolNotFoundError(f"Cannot execute {argv[0]}: {e}") from e

        if result.returncode != 0:
            raise CommandFailedError(argv, result.returncode, result.stdout)
        return result.stdout if capture else ""
