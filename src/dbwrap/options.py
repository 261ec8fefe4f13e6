import logging
from dataclasses import dataclass, fields, replace
from typing import Any

from dbwrap.classifier import DEFAULT_RULES, ClassificationRule, ErrorClassifier

__all__ = ['WrapOptions']


@dataclass
class WrapOptions:
    """Options

    - logger: where diagnostic records of classified errors are sent
      (default: the `dbwrap.classifier` logger)
    - rules: classification rule table (default: DEFAULT_RULES)
    - extra_rules: rules tried before `rules`, for engine-specific codes
    """
    logger: logging.Logger | None = None
    rules: tuple[ClassificationRule, ...] = DEFAULT_RULES
    extra_rules: tuple[ClassificationRule, ...] = ()

    def __post_init__(self):
        if self.logger is not None and not isinstance(self.logger, logging.Logger | logging.LoggerAdapter):
            raise ValueError(f'logger must be a logging.Logger, got {type(self.logger).__name__}')
        self.rules = tuple(self.rules)
        self.extra_rules = tuple(self.extra_rules)
        for rule in self.extra_rules + self.rules:
            if not isinstance(rule, ClassificationRule):
                raise ValueError(f'rules must be ClassificationRule instances, got {type(rule).__name__}')

    @classmethod
    def load(cls, options: 'WrapOptions | dict[str, Any] | None' = None,
             **kw: Any) -> 'WrapOptions':
        """Build options from an instance, a dict, or keyword arguments.

        Keyword arguments override values from `options`.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(kw) - known
        if isinstance(options, dict):
            unknown |= set(options) - known
        if unknown:
            raise ValueError(f'Unknown options: {sorted(unknown)}. Available: {sorted(known)}')

        if options is None:
            return cls(**kw)
        if isinstance(options, dict):
            return cls(**(options | kw))
        if isinstance(options, cls):
            return replace(options, **kw) if kw else options
        raise ValueError(f'options must be WrapOptions or dict, got {type(options).__name__}')

    def create_classifier(self) -> ErrorClassifier:
        return ErrorClassifier(rules=self.extra_rules + self.rules, logger=self.logger)
