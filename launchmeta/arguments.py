import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .common import LAUNCHER_NAME, LAUNCHER_VERSION, USER_TYPE
from .common.mojang import NATIVES_DIR
from .model.enum import StrEnum
from .model.instance import Account
from .model.mojang import Argument, ConditionalArgument, MojangArguments
from .platform import Platform
from .rules import RuleEvaluator

logger = logging.getLogger(__name__)

PLACEHOLDER = re.compile(r"\$\{([A-Za-z0-9_]+)\}")


class Placeholder(StrEnum):
    NativesDirectory = "natives_directory"
    LauncherName = "launcher_name"
    LauncherVersion = "launcher_version"
    Classpath = "classpath"
    VersionName = "version_name"
    VersionType = "version_type"
    GameDirectory = "game_directory"
    AssetsRoot = "assets_root"
    AssetsIndexName = "assets_index_name"
    UserType = "user_type"
    LoggingPath = "path"
    # bound once an account is known
    AuthPlayerName = "auth_player_name"
    AuthUuid = "auth_uuid"
    AuthAccessToken = "auth_access_token"
    ClientId = "clientid"
    AuthXuid = "auth_xuid"
    # launcher options
    ResolutionWidth = "resolution_width"
    ResolutionHeight = "resolution_height"


def substitute(arg: str, values: Mapping[str, str]) -> str:
    """
    Replaces the first ${...} token of `arg` when `values` knows it.

    Only the first token is looked at: a string carrying two placeholders needs two calls.
    """
    match = PLACEHOLDER.search(arg)
    if match is None:
        return arg
    value = values.get(match.group(1))
    if value is None:
        return arg
    return arg[:match.start()] + value + arg[match.end():]


@dataclass(frozen=True)
class ArgumentContext:
    version_id: str
    version_type: str
    instance_dir: Path
    assets_dir: Path
    asset_index_name: str
    library_paths: Sequence[Path]
    jar_path: Path
    logging_path: Optional[Path] = None
    launcher_name: str = LAUNCHER_NAME
    launcher_version: str = LAUNCHER_VERSION
    user_type: str = USER_TYPE

    def classpath(self, separator: str) -> str:
        return separator.join([str(p) for p in self.library_paths] + [str(self.jar_path)])

    def values(self, separator: str) -> Dict[str, str]:
        values = {
            Placeholder.NativesDirectory.value: str(self.instance_dir / NATIVES_DIR),
            Placeholder.LauncherName.value: self.launcher_name,
            Placeholder.LauncherVersion.value: self.launcher_version,
            Placeholder.Classpath.value: self.classpath(separator),
            Placeholder.VersionName.value: self.version_id,
            Placeholder.VersionType.value: self.version_type,
            Placeholder.GameDirectory.value: str(self.instance_dir),
            Placeholder.AssetsRoot.value: str(self.assets_dir),
            Placeholder.AssetsIndexName.value: self.asset_index_name,
            Placeholder.UserType.value: self.user_type,
        }
        if self.logging_path is not None:
            values[Placeholder.LoggingPath.value] = str(self.logging_path)
        return values


class ArgumentBuilder:
    """
    Builds the persistent part of a launch command:

        [jvm arguments] + [logging argument] + [main class] + [game arguments]

    Conditional groups are kept or dropped as a whole depending on their rules. Account
    and resolution placeholders are left in place for `bind_account`.
    """

    def __init__(self, context: ArgumentContext, platform: Optional[Platform] = None):
        self.context = context
        self.platform = platform or Platform.current()
        self.evaluator = RuleEvaluator(self.platform)
        self.values = context.values(self.platform.path_separator)

    def substitute(self, arg: str) -> str:
        return substitute(arg, self.values)

    def expand(self, arguments: Sequence[Argument]) -> List[str]:
        expanded: List[str] = []
        for arg in arguments:
            if isinstance(arg, ConditionalArgument):
                if not self.evaluator.evaluate(arg.rules):
                    continue
                expanded.extend(self.substitute(value) for value in arg.values)
            else:
                expanded.append(self.substitute(arg))
        return expanded

    def build(self, arguments: MojangArguments, main_class: str, logging_argument: Optional[str] = None) -> List[str]:
        formatted = self.expand(arguments.jvm)
        if logging_argument and self.context.logging_path is not None:
            formatted.append(self.substitute(logging_argument))
        formatted.append(main_class)
        formatted.extend(self.expand(arguments.game))
        logger.debug("Persistent arguments: %s", " ".join(formatted))
        return formatted


def late_values(account: Account, resolution: Optional[Tuple[int, int]] = None) -> Dict[str, str]:
    values = {
        Placeholder.AuthPlayerName.value: account.display_name,
        Placeholder.AuthUuid.value: account.uuid,
        Placeholder.AuthAccessToken.value: account.access_token,
    }
    if resolution is not None:
        values[Placeholder.ResolutionWidth.value] = str(resolution[0])
        values[Placeholder.ResolutionHeight.value] = str(resolution[1])
    return values


def bind_account(arguments: Sequence[str], account: Account, resolution: Optional[Tuple[int, int]] = None) -> List[str]:
    """Fills in the placeholders `ArgumentBuilder` had to leave for later."""
    values = late_values(account, resolution)
    return [substitute(arg, values) for arg in arguments]
