#
# datedprune
#
# A small CLI tool to prune backup files by the dates embedded in their names, using time-bucketed retention rules.
#
# Copyright (c) 2025-2026 Thomas Kuhlmann
#
# Licensed under the MIT License. See LICENSE file in the project root for license information.
#

import argparse
import re
import shutil
import sys
import tomllib
import traceback
from collections import Counter, defaultdict
from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass, fields, replace
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum, IntEnum
from pathlib import Path
from types import SimpleNamespace
from typing import Any, NoReturn, Optional, TextIO, no_type_check


VERSION: str = "dev-1.0.0"

DEFAULT_CONFIG_FILE: str = "config.toml"

DEFAULT_YEAR: int = 2022


class PatternError(ValueError):
    pass


class ParseFailure(ValueError):
    pass


class NoMatchError(ParseFailure):
    pass


class CalendarError(ParseFailure):
    pass


class ConfigError(ValueError):
    pass


class IntegrityCheckFailedError(Exception):
    pass


class ConfigNamespace(SimpleNamespace):
    pass


class LogLevel(IntEnum):
    ERROR = 0
    WARN = 1
    INFO = 2
    DEBUG = 3

    @classmethod
    def from_name_or_number(cls, prefix: str) -> "LogLevel":
        try:
            return next(m for m in cls if m.name.startswith(prefix.upper()))
        except StopIteration:
            try:
                return cls(int(prefix))
            except ValueError:
                raise ValueError("Invalid log level: " + prefix)


class Logger:
    _level: LogLevel
    _decisions: dict[str, list[tuple[str, Optional[str]]]]

    def __init__(self, level: LogLevel) -> None:
        self._level = level
        self._decisions = defaultdict(list)

    def has_log_level(self, level: LogLevel) -> bool:
        return level <= int(self._level)

    def _raw_verbose(self, level: LogLevel, message: str, file: Optional[TextIO] = None, prefix: str = "") -> None:
        print(f"[{prefix or LogLevel(level).name}] {message}", file=file or sys.stderr)

    def verbose(self, level: LogLevel, message: str, file: Optional[TextIO] = None, prefix: str = "") -> None:
        if self.has_log_level(level):
            self._raw_verbose(level, message, file, prefix)

    def add_decision(self, level: LogLevel, identifier: str, message: str, debug: Optional[str] = None) -> None:
        if self.has_log_level(level):
            if self.has_log_level(LogLevel.DEBUG):  # Decision history and debug details only with debug log level
                self._decisions[identifier].append((message, debug))
            else:
                self._decisions[identifier] = [(message, None)]

    def _format_decision(self, decision: tuple[str, Optional[str]]) -> str:
        message, debug = decision
        return message + (f" ({debug})" if debug is not None else "")

    def print_decisions(self, order: Optional[Iterable[str]] = None) -> None:
        identifiers = [identifier for identifier in (order if order is not None else self._decisions) if self._decisions.get(identifier)]
        if not identifiers:
            return
        longest_name_length = max(len(identifier) for identifier in identifiers)
        for identifier in dict.fromkeys(identifiers):
            *history, final = self._decisions[identifier]
            self._raw_verbose(LogLevel.INFO, f"{identifier:<{longest_name_length}}: {self._format_decision(final)}")
            if not self.has_log_level(LogLevel.DEBUG):
                continue
            for idx, decision in enumerate(history):
                self._raw_verbose(LogLevel.DEBUG, f"{' ' * ((longest_name_length + 2) + idx * 4)}└── {self._format_decision(decision)}")

    def clear_decisions(self) -> None:
        self._decisions.clear()


# File pattern templates

MONTH_ABBREVIATIONS: dict[str, int] = {name: number for number, name in enumerate(["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"], start=1)}

# placeholder -> (captured field, expression)
PLACEHOLDERS: dict[str, tuple[str, str]] = {
    "year": ("year", r"\d{4}"),
    "month": ("month", r"\d{1,2}"),
    "month_abbr": ("month_abbr", r"[a-zA-Z]{3}"),
    "month_abr": ("month_abbr", r"[a-zA-Z]{3}"),  # Legacy spelling from first config format
    "day": ("day", r"\d{1,2}"),
    "hour": ("hour", r"\d{1,2}"),
    "minutes": ("minutes", r"\d{1,2}"),
    "seconds": ("seconds", r"\d{1,2}"),
    "name": ("name", r".+"),
    "TZ": ("timezone", r"[+-]\d{2}:\d{2}"),
}

PLACEHOLDER_TOKEN = re.compile(r"\{(" + "|".join(re.escape(p) for p in PLACEHOLDERS) + r")\}")

UTC_OFFSET = re.compile(r"([+-])(\d{2}):(\d{2})")


@dataclass(frozen=True)
class FilePattern:
    template: str
    regex: re.Pattern[str]
    groups: tuple[tuple[str, str], ...]  # (group name, field)

    def captures(self, filename: str) -> Optional[dict[str, str]]:
        re_match = self.regex.search(filename)
        if re_match is None:
            return None
        captured: dict[str, str] = {}
        for group, field_name in self.groups:  # later occurrences of a field overwrite earlier ones
            value = re_match.group(group)
            if value is not None:
                captured[field_name] = value
        return captured


def tokenize_template(template: str) -> list[tuple[Optional[str], str]]:
    """Split a template into (placeholder, text) tokens; literal runs have no placeholder."""
    tokens: list[tuple[Optional[str], str]] = []
    position = 0
    for token in PLACEHOLDER_TOKEN.finditer(template):
        if token.start() > position:
            tokens.append((None, template[position : token.start()]))
        tokens.append((token.group(1), token.group(0)))
        position = token.end()
    if position < len(template):
        tokens.append((None, template[position:]))
    return tokens


def compile_pattern(template: str) -> FilePattern:
    parts: list[str] = []
    groups: list[tuple[str, str]] = []
    for placeholder, text in tokenize_template(template):
        if placeholder is None:
            parts.append(re.escape(text))
            continue
        field_name, expression = PLACEHOLDERS[placeholder]
        group = f"{field_name}_{len(groups)}"
        groups.append((group, field_name))
        parts.append(f"(?P<{group}>{expression})")
    try:
        regex = re.compile("".join(parts))
    # Literals are escaped, so only a broken placeholder expression can fail here
    except re.error as e:
        raise PatternError(f"Invalid file pattern '{template}': {e}") from e
    return FilePattern(template, regex, tuple(groups))


def parse_utc_offset(value: str) -> timezone:
    re_match = UTC_OFFSET.fullmatch(value.strip())
    if not re_match:
        raise ValueError(f"Invalid UTC offset: '{value}' (expected +HH:MM or -HH:MM)")
    sign, hours, minutes = re_match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    return timezone(-delta if sign == "-" else delta)


def extract_timestamp(pattern: FilePattern, filename: str, offset: tzinfo = timezone.utc) -> datetime:
    captured = pattern.captures(filename)
    if captured is None:
        raise NoMatchError(f"File name '{filename}' doesn't match file pattern '{pattern.template}'")

    # Unknown month abbreviations count as absent
    month = int(captured["month"]) if "month" in captured else MONTH_ABBREVIATIONS.get(captured.get("month_abbr", "").lower())

    try:
        if "timezone" in captured:
            offset = parse_utc_offset(captured["timezone"])
        return datetime(
            int(captured.get("year", DEFAULT_YEAR)),
            month if month is not None else 1,
            int(captured.get("day", 1)),
            int(captured.get("hour", 0)),
            int(captured.get("minutes", 0)),
            int(captured.get("seconds", 0)),
            tzinfo=offset,
        )
    except ValueError as e:
        raise CalendarError(f"File name '{filename}' contains no valid date: {e}") from e


# Retention policy and logic


@dataclass(frozen=True)
class TimestampedEntry:
    identifier: str
    timestamp: datetime


@dataclass(frozen=True)
class RetentionPolicy:
    keep_last: Optional[int] = None
    keep_hourly: Optional[int] = None  # Accepted in config, has no bucket pass
    keep_daily: Optional[int] = None
    keep_weekly: Optional[int] = None
    keep_monthly: Optional[int] = None
    keep_yearly: Optional[int] = None

    def is_identity(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    @classmethod
    def from_mapping(cls, mapping: Any) -> "RetentionPolicy":
        if not isinstance(mapping, dict):
            raise ConfigError(f"Invalid retention table: {mapping!r}")
        known = {f.name for f in fields(cls)}
        values: dict[str, int] = {}
        for key, value in mapping.items():
            name = key.replace("-", "_")
            if name not in known:
                raise ConfigError(f"Unknown retention setting: '{key}'")
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(f"Invalid value for '{key}': {value!r} (must be an integer >= 0)")
            values[name] = value
        return cls(**values)


@dataclass
class RetentionResult:
    keep: list[TimestampedEntry]
    drop: list[TimestampedEntry]


def parse_entries(filenames: Iterable[str], pattern: FilePattern, offset: tzinfo = timezone.utc) -> tuple[list[TimestampedEntry], list[tuple[str, ParseFailure]]]:
    entries: list[TimestampedEntry] = []
    failures: list[tuple[str, ParseFailure]] = []
    for filename in filenames:
        try:
            entries.append(TimestampedEntry(filename, extract_timestamp(pattern, filename, offset)))
        except ParseFailure as e:
            failures.append((filename, e))
    return entries, failures


def sort_entries(entries: Iterable[TimestampedEntry]) -> list[TimestampedEntry]:
    # Ascending stable sort, then reversed (newest first, equal timestamps in reversed input order)
    return sorted(entries, key=lambda entry: entry.timestamp)[::-1]


def daily_key(timestamp: datetime) -> date:
    return timestamp.date()


def weekly_key(timestamp: datetime) -> tuple[int, int]:
    year, week, _ = timestamp.isocalendar()
    return (year, week)


def monthly_key(timestamp: datetime) -> int:
    return timestamp.month  # Month only: the same month of different years shares one bucket


def yearly_key(timestamp: datetime) -> int:
    return timestamp.year


# (mode, policy attribute, bucket key), processed in this order after keep_last
GRANULARITIES: list[tuple[str, str, Callable[[datetime], Hashable]]] = [
    ("daily", "keep_daily", daily_key),
    ("weekly", "keep_weekly", weekly_key),
    ("monthly", "keep_monthly", monthly_key),
    ("yearly", "keep_yearly", yearly_key),
]


def _retain_buckets(
    entries: Sequence[TimestampedEntry],
    cursor: int,
    result: RetentionResult,
    mode: str,
    count: int,
    bucket_key: Callable[[datetime], Hashable],
    logger: Logger,
) -> int:
    """Walk the entries from cursor, keeping the first entry of each new bucket until count buckets are kept.

    Buckets of entries kept by earlier modes count as seen. Returns the new cursor.
    """
    seen = {bucket_key(entry.timestamp) for entry in result.keep}
    remaining = count
    while remaining > 0 and cursor < len(entries):
        entry = entries[cursor]
        cursor += 1
        key = bucket_key(entry.timestamp)
        if key in seen:
            result.drop.append(entry)
            logger.add_decision(LogLevel.INFO, entry.identifier, f"Dropping for mode '{mode}': bucket already kept", debug=f"key: {key}")
        else:
            seen.add(key)
            result.keep.append(entry)
            remaining -= 1
            logger.add_decision(LogLevel.INFO, entry.identifier, f"Keeping for mode '{mode}' {count - remaining:02d}/{count:02d}", debug=f"key: {key}")
    return cursor


def retain(entries: Sequence[TimestampedEntry], policy: RetentionPolicy, logger: Optional[Logger] = None) -> RetentionResult:
    """Partition entries (newest first) into keep and drop according to policy.

    One forward sweep is shared by all modes: an entry dropped by one mode is never
    reconsidered by a later one.
    """
    logger = logger or Logger(LogLevel.ERROR)

    if policy.is_identity():
        for entry in entries:
            logger.add_decision(LogLevel.INFO, entry.identifier, "Keeping: no retention rules specified")
        return RetentionResult(list(entries), [])

    result = RetentionResult([], [])
    cursor = 0

    if policy.keep_last is not None:
        last_entries = entries[: policy.keep_last]
        for index, entry in enumerate(last_entries, start=1):
            logger.add_decision(LogLevel.INFO, entry.identifier, f"Keeping last {index:02d}/{policy.keep_last:02d}")
        result.keep.extend(last_entries)
        cursor = len(last_entries)

    for mode, attribute, bucket_key in GRANULARITIES:
        count = getattr(policy, attribute)
        if count is not None:
            cursor = _retain_buckets(entries, cursor, result, mode, count, bucket_key, logger)

    for entry in entries[cursor:]:
        logger.add_decision(LogLevel.INFO, entry.identifier, "Dropping: not matched by any retention rule")
        result.drop.append(entry)

    # Simple integrity checks
    if not len(entries) == len(result.keep) + len(result.drop):
        raise IntegrityCheckFailedError(f"Entry count mismatch (all: {len(entries)}, keep: {len(result.keep)}, drop: {len(result.drop)})!!")
    if not Counter(e.identifier for e in entries) == Counter(e.identifier for e in result.keep + result.drop):
        raise IntegrityCheckFailedError("Entries of keep and drop differ from input entries!!")

    return result


# Configuration


@dataclass(frozen=True)
class RetentionPath:
    path: Path
    file_pattern: FilePattern
    retention: Optional[RetentionPolicy] = None


@dataclass(frozen=True)
class Config:
    retention: RetentionPolicy
    paths: tuple[RetentionPath, ...]
    utc_offset: tzinfo = timezone.utc

    def policy_for(self, retention_path: RetentionPath) -> RetentionPolicy:
        return retention_path.retention if retention_path.retention is not None else self.retention


def _parse_retention_path(index: int, data: Any) -> RetentionPath:
    if not isinstance(data, dict):
        raise ConfigError(f"paths[{index}]: must be a table")
    unknown = set(data) - {"path", "file-pattern", "retention"}
    if unknown:
        raise ConfigError(f"paths[{index}]: unknown setting(s): {', '.join(sorted(unknown))}")
    for key in ("path", "file-pattern"):
        if not isinstance(data.get(key), str):
            raise ConfigError(f"paths[{index}]: '{key}' is missing or not a string")
    retention = RetentionPolicy.from_mapping(data["retention"]) if "retention" in data else None
    return RetentionPath(Path(data["path"]), compile_pattern(data["file-pattern"]), retention)


def parse_config(data: dict[str, Any]) -> Config:
    unknown = set(data) - {"retention", "paths", "utc-offset"}
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
    retention = RetentionPolicy.from_mapping(data.get("retention", {}))
    paths = data.get("paths", [])
    if not isinstance(paths, list):
        raise ConfigError("'paths' must be an array of tables")
    utc_offset: tzinfo = timezone.utc
    if "utc-offset" in data:
        try:
            utc_offset = parse_utc_offset(str(data["utc-offset"]))
        except ValueError as e:
            raise ConfigError(str(e)) from e
    return Config(retention, tuple(_parse_retention_path(index, path) for index, path in enumerate(paths)), utc_offset)


def load_config(config_file: Path) -> Config:
    with open(config_file, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file '{config_file}': {e}") from e
    return parse_config(data)


# Execution


class ExecutionMode(Enum):
    DEFAULT = "default"
    DRY_RUN = "dry-run"
    SIMULATE = "simulate"


class ExecutionContext:
    mode: ExecutionMode
    simulate_path: Optional[Path]
    simulate_input: Optional[Path]
    _logger: Logger

    def __init__(self, mode: ExecutionMode, logger: Logger, simulate_path: Optional[Path] = None, simulate_input: Optional[Path] = None) -> None:
        self.mode = mode
        self.simulate_path = simulate_path
        self.simulate_input = simulate_input
        self._logger = logger

    @classmethod
    def from_args(cls, args: ConfigNamespace, logger: Logger) -> "ExecutionContext":
        if args.command == "simulate":
            return cls(ExecutionMode.SIMULATE, logger, args.path, args.input)
        return cls(ExecutionMode.DRY_RUN if args.dry_run else ExecutionMode.DEFAULT, logger)

    def _is_simulated_path(self, path: Path) -> bool:
        return self.simulate_path is not None and path.resolve() == self.simulate_path.resolve()

    def read_files(self, path: Path) -> list[str]:
        if self.mode == ExecutionMode.SIMULATE and self.simulate_input is not None:
            if not self._is_simulated_path(path):
                return []
            return self.simulate_input.read_text(encoding="utf-8").splitlines()

        if not path.exists():
            raise FileNotFoundError(f"Path not found: {path}")
        if not path.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {path}")
        return sorted(entry.name for entry in path.iterdir())

    def apply(self, path: Path, result: RetentionResult) -> None:
        if self.mode == ExecutionMode.DEFAULT:
            self._delete_files(path, result.drop)
        else:
            self._report(path, result)

    def _delete_files(self, path: Path, entries: Iterable[TimestampedEntry]) -> None:
        for entry in entries:
            file = path / entry.identifier
            if not file.exists() and not file.is_symlink():
                continue
            self._logger.verbose(LogLevel.INFO, f"DELETING: {file}")
            if file.is_dir() and not file.is_symlink():
                shutil.rmtree(file)
            else:
                file.unlink()

    def _report(self, path: Path, result: RetentionResult) -> None:
        self._logger.verbose(LogLevel.INFO, f"Keeping files: {', '.join(e.identifier for e in result.keep) or '-'}")
        self._logger.verbose(LogLevel.INFO, f"Dropping files: {', '.join(e.identifier for e in result.drop) or '-'}")
        if self.mode == ExecutionMode.DRY_RUN:
            for entry in result.drop:
                self._logger.verbose(LogLevel.INFO, f"DRY-RUN DELETE: {path / entry.identifier}")


def process_path(retention_path: RetentionPath, config: Config, context: ExecutionContext, logger: Logger) -> RetentionResult:
    policy = config.policy_for(retention_path)
    logger.verbose(LogLevel.DEBUG, f"Processing '{retention_path.path}' with pattern '{retention_path.file_pattern.template}' and {policy}")

    filenames = context.read_files(retention_path.path)
    entries, failures = parse_entries(filenames, retention_path.file_pattern, config.utc_offset)
    for _, failure in failures:
        logger.verbose(LogLevel.WARN, f"Unable to parse file: {failure}")
    entries = sort_entries(entries)

    result = retain(entries, policy, logger)

    logger.print_decisions(entry.identifier for entry in entries)
    logger.clear_decisions()

    logger.verbose(LogLevel.INFO, f"Path: {retention_path.path}")
    logger.verbose(LogLevel.INFO, f"Total files found:       {len(filenames):03d}")
    logger.verbose(LogLevel.INFO, f"Total files unparseable: {len(failures):03d}")
    logger.verbose(LogLevel.INFO, f"Total files keep:        {len(result.keep):03d}")
    logger.verbose(LogLevel.INFO, f"Total files drop:        {len(result.drop):03d}")

    context.apply(retention_path.path, result)
    return result


# Command line


class ModernHelpFormatter(argparse.HelpFormatter):
    @no_type_check
    def __init__(self, *a, **kw) -> None:  # noqa: ANN002, ANN003
        super().__init__(*a, max_help_position=30, width=160, **kw)

    @no_type_check
    def start_section(self, heading) -> None:  # noqa: ANN001
        super().start_section(heading.capitalize())


class ModernStrictArgumentParser(argparse.ArgumentParser):
    @no_type_check
    def __init__(self, *a, **kw) -> None:  # noqa: ANN002, ANN003
        super().__init__(*a, **kw)
        self._errors: list[str] = []

    def add_error(self, msg: str) -> None:
        if msg not in self._errors:
            self._errors.append(msg)

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        print("\nError(s):", file=sys.stderr)
        for line in message.split("\n"):
            print(f"  • {line}", file=sys.stderr)
        print("\nHint: Try '--help' for more information.", file=sys.stderr)
        sys.exit(2)

    # Argument type helpers
    def verbose_argument(self, value: str) -> LogLevel:
        try:
            return LogLevel.from_name_or_number(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"Invalid verbose value '{value}' (use ERROR, WARN, INFO, DEBUG or 0, 1, 2, 3)")

    def utc_offset_argument(self, value: str) -> timezone:
        try:
            return parse_utc_offset(value)
        except ValueError as e:
            raise argparse.ArgumentTypeError(str(e))

    # Internal helper methods
    def _suggest(self, argument: str) -> list[str]:
        opts = [o for a in self._actions for o in a.option_strings if o.startswith("--")]
        cand = [o for o in opts if abs(len(o) - len(argument)) <= 2 and sum(a != b for a, b in zip(o, argument)) <= 2]
        return cand[:1]

    @no_type_check
    def _validate_arguments(self, ns) -> None:  # noqa: ANN001
        # Reporting modes imply info verbosity, otherwise a successful run is silent
        if ns.verbose is None:
            ns.verbose = LogLevel.INFO if ns.dry_run or ns.command == "simulate" else LogLevel.WARN

        if ns.command == "simulate" and ns.input is not None and not ns.input.is_file():
            self.add_error(f"Input file not found: {ns.input}")

    # Main hook
    @no_type_check
    def parse_known_args(self, args=None, namespace=None) -> tuple[argparse.Namespace, list[str]]:  # noqa: ANN001
        self._errors = []
        ns, unknown = super().parse_known_args(args, namespace or argparse.Namespace())

        if unknown:
            sug = self._suggest(unknown[0])
            if sug:
                self.add_error(f"Unknown option: {unknown[0]} (did you mean {sug[0]}?)")
            else:
                self.add_error(f"Unknown option: {unknown[0]}")

        self._validate_arguments(ns)

        if self._errors:
            msg = "\n".join(f"{e}" for e in self._errors)
            self.error(msg)

        return ns, unknown


def create_parser() -> ModernStrictArgumentParser:
    parser: ModernStrictArgumentParser = ModernStrictArgumentParser(
        prog="datedprune",
        description=f"datedprune {VERSION}\n\nPrune backup files by the dates in their names using time-bucketed retention rules",
        epilog="Use with caution!! This tool deletes files unless --dry-run is set or the simulate command is used.",
        formatter_class=ModernHelpFormatter,
        add_help=False,
    )

    g_main = parser.add_argument_group("Main arguments")
    g_behavior = parser.add_argument_group("Behavior arguments")
    g_common = parser.add_argument_group("Common arguments")

    g_main.add_argument("--config", "-c", type=Path, default=Path(DEFAULT_CONFIG_FILE), metavar="file", help=f"Config file (default: {DEFAULT_CONFIG_FILE})")
    g_main.add_argument("--utc-offset", type=parser.utc_offset_argument, default=None, metavar="offset", help="UTC offset for file names without {TZ}, e.g. +02:00 (default: config or +00:00)")

    # fmt: off
    g_behavior.add_argument("--dry-run", "-d", action="store_true", help="Show keep and drop decisions but do not delete any files")
    g_behavior.add_argument("--verbose", "-V", "-v", type=parser.verbose_argument, default=None, nargs="?", const=LogLevel.INFO, metavar="lev",
        help="Verbosity level: 0 = error, 1 = warn, 2 = info, 3 = debug (default: 'info', if specified without value or in dry-run/simulate; 'warn' otherwise)")
    # fmt: on

    g_common.add_argument("--version", "-R", action="version", version=f"%(prog)s {VERSION}")
    g_common.add_argument("--help", "-h", action="help", help="Show this help message and exit")
    g_common.add_argument("--stacktrace", action="store_true", help=argparse.SUPPRESS)

    subparsers = parser.add_subparsers(dest="command", metavar="command", parser_class=argparse.ArgumentParser)
    simulate = subparsers.add_parser("simulate", help="Show retention decisions for a path without deleting anything", formatter_class=ModernHelpFormatter)
    simulate.add_argument("path", type=Path, help="Configured path to simulate the retention policy for")
    simulate.add_argument("--input", type=Path, default=None, metavar="file", help="Text file with one file name per line, used instead of the directory listing")

    return parser


def parse_arguments(argv: Optional[Sequence[str]] = None) -> ConfigNamespace:
    parser = create_parser()
    args = parser.parse_args(argv)
    return ConfigNamespace(**vars(args))


def handle_exception(exception: Exception, exit_code: int, stacktrace: bool, prefix: str = "") -> None:
    if stacktrace:
        traceback.print_exc()
    print(f"[{prefix or LogLevel.ERROR.name}] {exception}", file=sys.stderr)
    sys.exit(exit_code)


def main() -> None:
    args: Optional[ConfigNamespace] = None

    try:
        args = parse_arguments()
        logger = Logger(args.verbose)
        logger.verbose(LogLevel.DEBUG, f"Parsed arguments: {args}")

        config = load_config(args.config)
        if args.utc_offset is not None:
            config = replace(config, utc_offset=args.utc_offset)
        logger.verbose(LogLevel.DEBUG, f"Loaded config: {config}")

        context = ExecutionContext.from_args(args, logger)
        for retention_path in config.paths:
            process_path(retention_path, config, context, logger)

    except OSError as e:
        handle_exception(e, 1, args.stacktrace if args is not None else True)
    except PatternError as e:
        handle_exception(e, 3, args.stacktrace if args is not None else True)
    except ValueError as e:
        handle_exception(e, 2, args.stacktrace if args is not None else True)
    except IntegrityCheckFailedError as e:
        handle_exception(e, 7, args.stacktrace if args is not None else True)
    except Exception as e:
        handle_exception(e, 9, args.stacktrace if args is not None else True, prefix="UNEXPECTED ERROR")


if __name__ == "__main__":
    main()
