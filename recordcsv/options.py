from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple, Union


# ----------------------------
# Cultures
# ----------------------------

@dataclass(frozen=True)
class Culture:
    """Formatting conventions for numbers and dates.

    The invariant culture (name ``""``) is locale-neutral and is the default.
    Day names start on Monday, matching ``datetime.weekday()``.
    """

    name: str = ""
    decimal_separator: str = "."
    date_separator: str = "/"
    time_separator: str = ":"
    month_names: Tuple[str, ...] = (
        "January", "February", "March", "April", "May", "June",
        "July", "August", "September", "October", "November", "December",
    )
    abbreviated_month_names: Tuple[str, ...] = (
        "Jan", "Feb", "Mar", "Apr", "May", "Jun",
        "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
    )
    day_names: Tuple[str, ...] = (
        "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
    )
    abbreviated_day_names: Tuple[str, ...] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
    am_designator: str = "AM"
    pm_designator: str = "PM"

    def __str__(self) -> str:
        return self.name or "invariant"


INVARIANT = Culture()

_CULTURES: Dict[str, Culture] = {
    "": INVARIANT,
    "en-US": Culture(name="en-US"),
    "de-DE": Culture(
        name="de-DE",
        decimal_separator=",",
        date_separator=".",
        month_names=(
            "Januar", "Februar", "März", "April", "Mai", "Juni",
            "Juli", "August", "September", "Oktober", "November", "Dezember",
        ),
        abbreviated_month_names=(
            "Jan.", "Feb.", "März", "Apr.", "Mai", "Juni",
            "Juli", "Aug.", "Sept.", "Okt.", "Nov.", "Dez.",
        ),
        day_names=("Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"),
        abbreviated_day_names=("Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"),
        am_designator="",
        pm_designator="",
    ),
    "fr-FR": Culture(
        name="fr-FR",
        decimal_separator=",",
        month_names=(
            "janvier", "février", "mars", "avril", "mai", "juin",
            "juillet", "août", "septembre", "octobre", "novembre", "décembre",
        ),
        abbreviated_month_names=(
            "janv.", "févr.", "mars", "avr.", "mai", "juin",
            "juil.", "août", "sept.", "oct.", "nov.", "déc.",
        ),
        day_names=("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"),
        abbreviated_day_names=("lun.", "mar.", "mer.", "jeu.", "ven.", "sam.", "dim."),
        am_designator="",
        pm_designator="",
    ),
    "ja-JP": Culture(
        name="ja-JP",
        month_names=tuple(f"{i}月" for i in range(1, 13)),
        abbreviated_month_names=tuple(f"{i}月" for i in range(1, 13)),
        day_names=("月曜日", "火曜日", "水曜日", "木曜日", "金曜日", "土曜日", "日曜日"),
        abbreviated_day_names=("月", "火", "水", "木", "金", "土", "日"),
        am_designator="午前",
        pm_designator="午後",
    ),
}


def get_culture(name: str) -> Culture:
    try:
        return _CULTURES[name]
    except KeyError:
        raise ValueError(f"Unknown culture: {name!r}") from None


def register_culture(culture: Culture) -> None:
    """Make ``culture`` available by name to ``SerializerOptions(culture=...)``."""
    _CULTURES[culture.name] = culture


# ----------------------------
# Serializer options
# ----------------------------

@dataclass(frozen=True)
class SerializerOptions:
    delimiter: str = ","
    include_header: bool = True
    datetime_format: str = "yyyy-MM-dd HH:mm:ss"
    culture: Union[Culture, str] = INVARIANT
    # bool parsing (case-insensitive); the first literal of each is written
    bool_true: Tuple[str, ...] = ("true", "t", "yes", "y", "1")
    bool_false: Tuple[str, ...] = ("false", "f", "no", "n", "0")
    _resolved_culture: Culture = field(init=False, repr=False, compare=False, default=INVARIANT)

    def __post_init__(self) -> None:
        if not self.delimiter:
            raise ValueError("delimiter must contain at least one character")
        if not self.datetime_format:
            raise ValueError("datetime_format must not be empty")
        culture = self.culture
        if isinstance(culture, str):
            culture = get_culture(culture)
        object.__setattr__(self, "_resolved_culture", culture)

    @property
    def delimiter_char(self) -> str:
        """Only the first character of ``delimiter`` separates fields."""
        return self.delimiter[0]

    @property
    def culture_info(self) -> Culture:
        return self._resolved_culture


DEFAULT_OPTIONS = SerializerOptions()
