"""Pydantic models describing the capital gains rule-year configuration schema."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _ensure_rate(value: float, label: str) -> None:
    if value < 0 or value > 1:
        raise ConfigurationError(f"{label} must be between 0 and 1")


class TaxBracket(ImmutableModel):
    """Represents a single progressive income-tax slab."""

    upper_bound: float | None = Field(default=None, alias="upper")
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.rate < 0:
            raise ConfigurationError("Tax rates must be non-negative")
        if self.upper_bound is not None and self.upper_bound <= 0:
            raise ConfigurationError("Upper bounds must be positive values")
        return self


class CostInflationIndexEntry(ImmutableModel):
    """A single fiscal-year row of the cost inflation index."""

    year: int = Field(..., ge=1900, le=2200)
    value: int = Field(..., gt=0)
    estimate: bool = False


class CostInflationIndexConfig(ImmutableModel):
    """Cost inflation index table keyed by the fiscal year's starting calendar year."""

    base_year: int
    entries: Sequence[CostInflationIndexEntry]

    @field_validator("entries", mode="before")
    @classmethod
    def _coerce_entries(cls, value: Any) -> Sequence[Any]:
        # ``{2001: 100, 2002: 105}`` is accepted as shorthand for plain rows
        if isinstance(value, Mapping):
            return [{"year": int(year), "value": cii} for year, cii in value.items()]
        if value is None:
            return []
        return value

    @model_validator(mode="after")
    def _validate_table(self) -> CostInflationIndexConfig:
        if not self.entries:
            raise ConfigurationError("Cost inflation index requires at least one entry")

        years = [entry.year for entry in self.entries]
        if years != sorted(years) or len(set(years)) != len(years):
            raise ConfigurationError(
                "Cost inflation index years must be unique and in ascending order"
            )

        previous: int | None = None
        for entry in self.entries:
            if previous is not None and entry.value < previous:
                raise ConfigurationError(
                    f"Cost inflation index must not decrease (year {entry.year})"
                )
            previous = entry.value

        if self.entries[0].year != self.base_year:
            raise ConfigurationError(
                "Cost inflation index must start at the configured base year"
            )
        return self

    def as_mapping(self) -> dict[int, int]:
        return {entry.year: entry.value for entry in self.entries}


class HoldingConfig(ImmutableModel):
    """Holding-period classification thresholds."""

    long_term_threshold_months: int = Field(default=24, gt=0)


class RegimeConfig(ImmutableModel):
    """Rates for the competing long-term regimes and the short-term fallback."""

    cutoff_date: date
    indexed_rate: float
    non_indexed_rate: float
    short_term_rate: float

    @model_validator(mode="after")
    def _validate_rates(self) -> RegimeConfig:
        _ensure_rate(self.indexed_rate, "Indexed regime rate")
        _ensure_rate(self.non_indexed_rate, "Non-indexed regime rate")
        _ensure_rate(self.short_term_rate, "Short-term rate")
        return self


class ExemptionSectionConfig(ImmutableModel):
    """Parameters for a single reinvestment exemption section."""

    name: str
    description: str = ""
    cap: float | None = None
    deadline_months: int = Field(..., gt=0)
    lock_in_years: int = Field(..., gt=0)
    interest_rate: float | None = None
    notes: Sequence[str] = Field(default_factory=tuple)

    @field_validator("notes", mode="before")
    @classmethod
    def _coerce_notes(cls, value: Any) -> Sequence[str]:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        if isinstance(value, Sequence):
            return tuple(str(item) for item in value)
        raise ConfigurationError("Exemption notes must be a list of strings")

    @model_validator(mode="after")
    def _validate_values(self) -> ExemptionSectionConfig:
        if self.cap is not None and self.cap <= 0:
            raise ConfigurationError("Exemption caps must be positive when provided")
        if self.interest_rate is not None:
            _ensure_rate(self.interest_rate, "Exemption interest rate")
        return self


class ExemptionsConfig(ImmutableModel):
    """Exemption sections available for long-term gains."""

    section_54: ExemptionSectionConfig
    section_54ec: ExemptionSectionConfig
    section_54f: ExemptionSectionConfig

    @model_validator(mode="after")
    def _validate_sections(self) -> ExemptionsConfig:
        if self.section_54.cap is None:
            raise ConfigurationError("Section 54 requires a statutory cap")
        if self.section_54ec.cap is None:
            raise ConfigurationError("Section 54EC requires a statutory cap")
        if self.section_54ec.interest_rate is None:
            raise ConfigurationError("Section 54EC requires a bond interest rate")
        return self


class ProjectionConfig(ImmutableModel):
    """Default assumptions used by the return projections."""

    baseline_rate: float = 0.08
    default_appreciation_rate: float = 0.08
    appreciation_tax_rate: float = 0.125
    default_tax_slab: float = 0.30
    reinvestment_lock_in_years: int = Field(default=3, gt=0)

    @model_validator(mode="after")
    def _validate_rates(self) -> ProjectionConfig:
        _ensure_rate(self.baseline_rate, "Baseline rate")
        _ensure_rate(self.appreciation_tax_rate, "Appreciation tax rate")
        _ensure_rate(self.default_tax_slab, "Default tax slab")
        if self.default_appreciation_rate < -1:
            raise ConfigurationError("Default appreciation rate cannot be below -100%")
        return self


class IncomeTaxSlabsConfig(ImmutableModel):
    """Personal income-tax slabs for the new and old regimes."""

    new: Sequence[TaxBracket]
    old: Sequence[TaxBracket]

    @model_validator(mode="after")
    def _validate_brackets(self) -> IncomeTaxSlabsConfig:
        for brackets in (self.new, self.old):
            _validate_bracket_sequence(brackets)
        return self

    def brackets_for(self, regime: str) -> Sequence[TaxBracket]:
        if regime == "old":
            return self.old
        return self.new


def _validate_bracket_sequence(brackets: Sequence[TaxBracket]) -> None:
    if not brackets:
        raise ConfigurationError("At least one tax bracket must be defined")
    last_upper: float | None = None
    for bracket in brackets:
        upper = bracket.upper_bound
        if last_upper is not None and upper is not None and upper <= last_upper:
            raise ConfigurationError("Tax brackets must be in ascending order")
        last_upper = upper if upper is not None else last_upper
    if brackets[-1].upper_bound is not None:
        raise ConfigurationError("Final tax bracket must have an open upper bound")


class YearConfiguration(ImmutableModel):
    """Complete rule set for a single rule year."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    cess_rate: float
    cost_inflation_index: CostInflationIndexConfig
    holding: HoldingConfig = Field(default_factory=HoldingConfig)
    regimes: RegimeConfig
    exemptions: ExemptionsConfig
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    income_tax_slabs: IncomeTaxSlabsConfig

    @model_validator(mode="after")
    def _validate_year(self) -> YearConfiguration:
        _ensure_rate(self.cess_rate, "Cess rate")
        return self


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported rule year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available rule-year configuration files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "ConfigurationError",
    "CostInflationIndexConfig",
    "CostInflationIndexEntry",
    "ExemptionSectionConfig",
    "ExemptionsConfig",
    "HoldingConfig",
    "ImmutableModel",
    "IncomeTaxSlabsConfig",
    "ProjectionConfig",
    "RegimeConfig",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ValidationError",
    "YearConfiguration",
]
