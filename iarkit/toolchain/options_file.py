"""
Options file support for the IAR tools.

Long argument lists are moved into a file which the tool reads through
'-f <file>'. A few options are honoured only when given on the real command
line, so they are kept there instead of being written to the file.
"""

import logging
from pathlib import Path
from typing import FrozenSet, Iterable, List, Sequence, Tuple, Union

from iarkit.core.exceptions import OptionsFileError

logger = logging.getLogger(__name__)

OPTIONS_FILE_NAME = "options.txt"
OPTIONS_FILE_FLAG = "-f"

# --utf8_text_in changes how the options file itself is decoded and
# --silent suppresses the sign-on banner printed before the file is read.
COMMAND_LINE_ONLY_ARGS: FrozenSet[str] = frozenset({"--utf8_text_in", "--silent"})


def partition_args(
    args: Sequence[str], command_line_only: Iterable[str] = COMMAND_LINE_ONLY_ARGS
) -> Tuple[List[str], List[str]]:
    """
    Split arguments into those kept on the command line and the rest.

    Relative order is preserved within both parts.
    """
    keep = frozenset(command_line_only)
    command_line = [arg for arg in args if arg in keep]
    rest = [arg for arg in args if arg not in keep]
    return command_line, rest


class IarOptionsFileArgsWriter:
    """
    Rewrites an argument list to use an options file.

    Attributes:
        temp_dir: Directory the options file is written to
        command_line_only_args: Arguments that must stay on the command line
        options_flag: Flag telling the tool to read the options file
    """

    def __init__(
        self,
        temp_dir: Union[str, Path],
        command_line_only_args: Iterable[str] = COMMAND_LINE_ONLY_ARGS,
        options_flag: str = OPTIONS_FILE_FLAG,
    ):
        self.temp_dir = Path(temp_dir)
        self.command_line_only_args = frozenset(command_line_only_args)
        self.options_flag = options_flag

    @property
    def options_file(self) -> Path:
        return (self.temp_dir / OPTIONS_FILE_NAME).absolute()

    def rewrite(self, args: Sequence[str]) -> List[str]:
        """
        Write the options file and return the short command line.

        Args:
            args: Complete argument list

        Returns:
            Command-line-only arguments followed by '-f <options file>'

        Raises:
            OptionsFileError: If the options file cannot be written, or an
                argument cannot be represented on a single line
        """
        command_line, file_args = partition_args(args, self.command_line_only_args)
        options_file = self.options_file

        # One argument per line; a line break would split an argument in two.
        for arg in file_args:
            if "\n" in arg or "\r" in arg:
                raise OptionsFileError(
                    options_file, f"Argument {arg!r} contains a line break."
                )

        try:
            options_file.parent.mkdir(parents=True, exist_ok=True)
            with open(options_file, "w", encoding="utf-8", newline="\n") as f:
                for arg in file_args:
                    f.write(arg)
                    f.write("\n")
        except OSError as e:
            raise OptionsFileError(options_file) from e

        logger.debug(f"Wrote {len(file_args)} argument(s) to {options_file}")
        return command_line + [self.options_flag, str(options_file)]


def rewrite(full_args: Sequence[str], scratch_directory: Union[str, Path]) -> List[str]:
    """Rewrite arguments to use an options file in scratch_directory."""
    return IarOptionsFileArgsWriter(scratch_directory).rewrite(full_args)
