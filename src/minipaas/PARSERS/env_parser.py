"""
Parsers for image environments declared as KEY=VALUE strings.
"""
from typing import Dict, Iterable, Optional

class EnvParser:
    """
    Parser for the ``Config.Env`` list reported by ``inspect``.
    """
    @staticmethod
    def parse_from_list(entries: Optional[Iterable[str]]) -> Dict[str, str]:
        """
        Parses environment variables from KEY=VALUE entries.
        Values may contain '='; an entry without one maps to an empty string.

        Args:
            entries (Optional[Iterable[str]]): Entries as reported by the engine.

        Returns:
            Dict[str, str]: Dictionary of environment variables.
        """
        env = {}
        for entry in entries or []:
            key, _, value = entry.partition('=')
            if not key:
                continue
            env[key] = value
        return env
