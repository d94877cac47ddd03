"""Static material and work-package catalog.

Constraints come from manufacturer installation limits. Work packages either
carry their own constraints or inherit those of the material they install.
Everything here is immutable and safe to share across threads.
"""

from __future__ import annotations

from typing import Tuple

from guardian.domain import ComplianceResult, Material, WorkConstraints, WorkPackage


MATERIALS: Tuple[Material, ...] = (
    Material(
        id="green-lock-plus",
        name="Green-Lock Plus Membrane Adhesive",
        category="Roofing (Mod. Bit.)",
        description="Cold-applied adhesive for modified bitumen. Critical: must be 40F and rising.",
        constraints=WorkConstraints(min_temp=40, rising_required=True, no_precip=True),
    ),
    Material(
        id="r-mer-seal",
        name="R-Mer Seal Underlayment",
        category="Roofing (Metal)",
        description="High-temp self-adhering underlayment. Installation 50F and rising.",
        constraints=WorkConstraints(min_temp=50, max_temp=100, rising_required=True, no_precip=True),
    ),
    Material(
        id="garla-block-2k",
        name="Garla-Block 2K (Primer)",
        category="Roofing (Mod. Bit.)",
        description="Primer. Do not use if temp drops below 50F within 6 hours.",
        constraints=WorkConstraints(min_temp=50, no_precip=True),
        storage_temp_min=40,
        storage_temp_max=90,
    ),
    Material(
        id="garla-flex",
        name="Garla-Flex (Mastic)",
        category="Roofing (Mod. Bit.)",
        description="Mastic. Application below 40F not recommended.",
        constraints=WorkConstraints(min_temp=40, no_precip=True),
    ),
    Material(
        id="tuff-stuff-ms",
        name="Tuff-Stuff MS (Sealant)",
        category="Roofing (Mod. Bit.)",
        description="Sealant. Heat sensitive storage.",
        constraints=WorkConstraints(no_precip=True),
        storage_temp_max=80,
    ),
    Material(
        id="optimax-membrane",
        name="OptiMax Mineral Membrane",
        category="Roofing (Mod. Bit.)",
        description="Mod bit rolls. Store above 50F; in cold weather only remove rolls for immediate install.",
        constraints=WorkConstraints(min_temp=40, no_precip=True),
        storage_temp_min=50,
    ),
    Material(
        id="pyramic-plus-lo",
        name="Pyramic Plus LO (Reflective Coating)",
        category="Roofing (Coatings)",
        description="Reflective coating. Do not allow to freeze.",
        constraints=WorkConstraints(min_temp=33, no_precip=True),
    ),
    Material(
        id="tuff-flash-plus",
        name="Tuff-Flash Plus LO (Liquid Flashing)",
        category="Roofing (Mod. Bit.)",
        description="Liquid flashing. Wide service range, but application needs a dry surface.",
        constraints=WorkConstraints(no_precip=True),
    ),
    Material(
        id="general-roofing",
        name="General Roofing Installation",
        category="General",
        description="Base rule: do not install roofing when air temp is below 40F.",
        constraints=WorkConstraints(min_temp=40, max_wind=20, no_precip=True),
    ),
)

_MATERIALS_BY_ID = {m.id: m for m in MATERIALS}


def _from_material(
    material_id: str,
    *,
    name: str,
    description: str,
    required_hours: float,
    lead_time_hours: float,
) -> WorkPackage:
    """Build a package that installs a catalog material and shares its constraints."""
    return WorkPackage(
        id=material_id,
        name=name,
        description=description,
        required_hours=required_hours,
        lead_time_hours=lead_time_hours,
        constraints=_MATERIALS_BY_ID[material_id].constraints,
        material_id=material_id,
    )


WORK_PACKAGES: Tuple[WorkPackage, ...] = (
    _from_material(
        "green-lock-plus",
        name="Green-Lock Plus Adhesive",
        description="Temp sensitive adhesive. Requires rising temps and dry surface.",
        required_hours=3,
        lead_time_hours=12,
    ),
    _from_material(
        "r-mer-seal",
        name="R-Mer Seal Underlayment",
        description="Critical temp threshold for warranty compliance.",
        required_hours=3,
        lead_time_hours=12,
    ),
    _from_material(
        "garla-block-2k",
        name="Garla-Block 2K Primer",
        description="Requires 6 hour dry/temperature window.",
        required_hours=6,
        lead_time_hours=18,
    ),
    _from_material(
        "pyramic-plus-lo",
        name="Pyramic Plus LO Coating",
        description="Needs extended dry window and freeze protection.",
        required_hours=24,
        lead_time_hours=24,
    ),
    WorkPackage(
        id="metal-panel-install",
        name="Metal Panel Installation",
        description="Wind-sensitive work. Avoid gusts and precipitation.",
        required_hours=3,
        lead_time_hours=12,
        constraints=WorkConstraints(min_temp=20, max_wind=25, no_precip=True),
    ),
    _from_material(
        "tuff-flash-plus",
        name="Tuff-Flash Plus Liquid Flashing",
        description="Requires dry surface and mild temperatures.",
        required_hours=3,
        lead_time_hours=12,
    ),
)

_PACKAGES_BY_ID = {p.id: p for p in WORK_PACKAGES}


def get_work_packages() -> Tuple[WorkPackage, ...]:
    """Return every work package in catalog order."""
    return WORK_PACKAGES


def get_work_package(package_id: str) -> WorkPackage:
    """Look up a work package; raises KeyError for unknown ids."""
    try:
        return _PACKAGES_BY_ID[package_id]
    except KeyError:
        raise KeyError(f"Unknown work package '{package_id}'") from None


def get_materials() -> Tuple[Material, ...]:
    """Return every material in catalog order."""
    return MATERIALS


def get_material(material_id: str) -> Material:
    """Look up a material; raises KeyError for unknown ids."""
    try:
        return _MATERIALS_BY_ID[material_id]
    except KeyError:
        raise KeyError(f"Unknown material '{material_id}'") from None


def check_compliance(material_id: str, current_temp: float, wind_speed: float, is_precipitating: bool) -> ComplianceResult:
    """Check current conditions against a material's installation limits."""
    material = _MATERIALS_BY_ID.get(material_id)
    if material is None:
        return ComplianceResult(compliant=False, reasons=["Material not found"])

    c = material.constraints
    reasons: list[str] = []
    if c.min_temp is not None and current_temp < c.min_temp:
        reasons.append(f"Temp {round(current_temp)}F is below min {c.min_temp:g}F")
    if c.max_temp is not None and current_temp > c.max_temp:
        reasons.append(f"Temp {round(current_temp)}F is above max {c.max_temp:g}F")
    if c.max_wind is not None and wind_speed > c.max_wind:
        reasons.append(f"Wind {round(wind_speed)}mph exceeds max {c.max_wind:g}mph")
    if c.no_precip and is_precipitating:
        reasons.append("Precipitation detected")

    return ComplianceResult(compliant=not reasons, reasons=reasons)
