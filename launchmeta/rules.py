import logging
from typing import Iterable, Optional

from .errors import RuleContractError
from .model import MojangRule
from .platform import Platform

logger = logging.getLogger(__name__)

OS_ALIASES = {
    "osx": "macos",
}

ARCH_ALIASES = {
    "x86": ("x86", "x86_64"),
}

OS_CONDITION_KEYS = ("name", "arch", "version")


class RuleEvaluator:
    """
    Decides whether a rule list applies to a platform.

    A list applies when every rule passes. A rule passes when its predicate matches and the
    action is "allow", or when it does not match and the action is "disallow".
    """

    def __init__(self, platform: Optional[Platform] = None):
        self.platform = platform or Platform.current()

    def evaluate(self, rules: Optional[Iterable[MojangRule]]) -> bool:
        if rules is None:
            return True
        for rule in rules:
            if not self.rule_passes(rule):
                return False
        return True

    def rule_passes(self, rule: MojangRule) -> bool:
        matches = self.rule_matches(rule)
        if rule.action == "allow":
            return matches
        elif rule.action == "disallow":
            return not matches
        raise RuleContractError(f"Unknown rule action: {rule.action}")

    def rule_matches(self, rule: MojangRule) -> bool:
        if rule.features is not None:
            # TODO: feature rules need launcher options (demo user, custom resolution, quick play)
            logger.debug("Feature rule %s treated as not matching", rule.features)
            return False
        if rule.os is not None:
            return self.os_matches(rule.os)
        return True

    def os_matches(self, conditions) -> bool:
        for key in conditions:
            if key not in OS_CONDITION_KEYS:
                raise RuleContractError(f"Unknown rule map key: {key}")
        for key, value in conditions.items():
            if key == "name":
                if OS_ALIASES.get(value, value) != self.platform.os_name:
                    return False
            elif key == "arch":
                if self.platform.arch not in ARCH_ALIASES.get(value, (value,)):
                    return False
            # os version is not checked
        return True


def evaluate(rules: Optional[Iterable[MojangRule]], platform: Optional[Platform] = None) -> bool:
    return RuleEvaluator(platform).evaluate(rules)
