# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Asynchronous execution of engine commands.
"""
import asyncio
import logging
from typing import List

from ..exceptions import CommandError

logger = logging.getLogger(__name__)

class CommandRunner:
    """
    Runs one executable with varying arguments as child processes.
    """
    def __init__(self, command: str = "docker"):
        """
        Initializes the command runner.

        Args:
            command (str): Executable to invoke, looked up on PATH.
        """
        self.command = command

    async def run(self, args: List[str]) -> str:
        """
        Runs the command to completion and collects its standard output.

        Args:
            args (List[str]): Arguments for the executable.

        Returns:
            str: Decoded standard output.

        Raises:
            CommandError: If the process cannot be spawned or exits non-zero.
        """
        logger.debug("running: %s %s", self.command, " ".join(args))
        try:
            process = await asyncio.create_subprocess_exec(
                self.command,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CommandError(self.command, args, stderr=str(e)) from e

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise CommandError(
                self.command,
                args,
                returncode=process.returncode,
                stderr=stderr.decode(errors="replace"),
            )
        return stdout.decode(errors="replace")

    async def run_interactive(self, args: List[str]) -> int:
        """
        Runs the command attached to the caller's terminal.

        Returns:
            int: The exit status of the command.
        """
        logger.debug("attaching: %s %s", self.command, " ".join(args))
        try:
            process = await asyncio.create_subprocess_exec(self.command, *args)
        except OSError as e:
            raise CommandError(self.command, args, stderr=str(e)) from e
        return await process.wait()
