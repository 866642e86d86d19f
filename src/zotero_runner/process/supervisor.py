"""Host process lifecycle.

The supervisor is the single owner of the host's process handle: ``start``
replaces it and ``stop`` clears it.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import socket

from zotero_runner.errors import ProcessError
from zotero_runner.options import RunOptions
from zotero_runner.process.termination import force_kill, is_process_running
from zotero_runner.remote import RemoteControlClient

logger = logging.getLogger(__name__)
host_logger = logging.getLogger("zotero_runner.host")

DEBUG_ENV = {
    "XPCOM_DEBUG_BREAK": "stack",
    "NS_TRACE_MALLOC_DISABLE_STACKS": "1",
}
TERMINATE_TIMEOUT_SECONDS = 5.0


def find_free_tcp_port(host: str = "127.0.0.1") -> int:
    """Ask the OS for an unused TCP port on ``host``."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((host, 0))
        return sock.getsockname()[1]


def build_args(options: RunOptions, port: int) -> list[str]:
    """Build the host command line arguments (without the binary)."""
    args = ["--purgecaches", "-no-remote", "-profile", str(options.profile_dir)]
    if options.data_path is not None:
        # --dataDir must be absolute
        args += ["--dataDir", str(options.data_path)]
    if options.devtools:
        args.append("--jsdebugger")
    args += options.binary_args
    args += ["-start-debugger-server", str(port)]
    return args


def build_env() -> dict[str, str]:
    return {**os.environ, **DEBUG_ENV}


class ProcessSupervisor:
    """Spawns the host binary and guarantees its termination."""

    def __init__(self, client: RemoteControlClient) -> None:
        self.client = client
        self._process: asyncio.subprocess.Process | None = None
        self._drain_task: asyncio.Task[None] | None = None
        self.port: int | None = None

    @property
    def process(self) -> asyncio.subprocess.Process | None:
        return self._process

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self, options: RunOptions) -> None:
        """Spawn the host and block until the control channel is live.

        Raises:
            ProcessError: If the binary cannot be spawned or the connect fails
        """
        port = find_free_tcp_port()
        args = build_args(options, port)
        logger.info("Starting %s %s", options.binary_path, " ".join(args))

        try:
            self._process = await asyncio.create_subprocess_exec(
                options.binary_path,
                *args,
                env=build_env(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except OSError as e:
            raise ProcessError(f"Failed to start {options.binary_path}: {e}") from e

        self.port = port
        self._drain_task = asyncio.create_task(self._drain_output(self._process))

        try:
            await self.client.connect(port)
        except Exception as e:
            msg = f"Failed to connect to the remote debugger on port {port}: {e}"
            raise ProcessError(msg) from e
        logger.debug("Connected to the remote debugger on port %d", port)

    @staticmethod
    async def _drain_output(process: asyncio.subprocess.Process) -> None:
        """Forward host output line by line without keeping it."""
        if process.stdout is None:
            return
        # The host can log without bound; on macOS it blocks if the pipe fills
        while True:
            try:
                line = await process.stdout.readline()
            except ValueError:
                # Over-long line; the reader has already discarded it
                continue
            if not line:
                break
            host_logger.debug(line.decode("utf-8", errors="replace").rstrip())

    async def stop(self, kill_command: str | None = None, process_name: str = "zotero") -> None:
        """Terminate the host. Never raises.

        The owned handle is signalled first, then the forced-kill strategy runs
        unconditionally.
        """
        process, self._process = self._process, None

        if process is None:
            logger.debug("No host process handle to terminate")
        elif process.returncode is not None:
            logger.debug("Host process already exited with %s", process.returncode)
        else:
            try:
                process.terminate()
                await asyncio.wait_for(process.wait(), timeout=TERMINATE_TIMEOUT_SECONDS)
            except ProcessLookupError:
                logger.debug("Host process was already gone")
            except TimeoutError:
                logger.warning("Host process did not exit after terminate, killing it")
                await self._kill_handle(process)
            except Exception as e:
                logger.error("Failed to terminate host process: %s", e)

        if self._drain_task is not None:
            self._drain_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await self._drain_task
            self._drain_task = None

        try:
            await force_kill(kill_command, process_name)
        except Exception as e:
            logger.error("Forced kill failed unexpectedly: %s", e)

        try:
            if await asyncio.to_thread(is_process_running, process_name):
                logger.warning("A '%s' process is still running after forced kill", process_name)
        except Exception as e:
            logger.debug("Could not check for surviving host processes: %s", e)

    @staticmethod
    async def _kill_handle(process: asyncio.subprocess.Process) -> None:
        """Kill and reap a handle that ignored ``terminate``."""
        try:
            process.kill()
            await asyncio.wait_for(process.wait(), timeout=TERMINATE_TIMEOUT_SECONDS)
        except ProcessLookupError:
            logger.debug("Host process exited before it could be killed")
        except TimeoutError:
            logger.error("Host process %s did not exit after kill", process.pid)
        except Exception as e:
            logger.error("Failed to kill host process: %s", e)
