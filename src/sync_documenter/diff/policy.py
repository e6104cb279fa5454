"""Facet policies: which elements a facet covers and how they are keyed.

A ``FacetPolicy`` describes one category of connector configuration:

- which child elements of a connector belong to it (``element_type`` plus
  optional ``where`` / ``where_not`` attribute filters),
- which attributes form the identity key (``identity``),
- comparison switches (``case_insensitive``, ``order_sensitive``,
  ``ignored``),
- the columns shown in the report, optional grouping into subsections,
  and an optional ``child`` policy for nested elements.

Connector types differ only in *which* facets apply to them, so instead of
a documenter class per connector type the ``CONNECTOR_FACETS`` table maps
a connector category to an ordered list of facet names.

The ``get_policy()`` factory maps facet names to registered policies.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from sync_documenter.diff.errors import PolicyMismatchError
from sync_documenter.diff.models import ConfigElement

logger = logging.getLogger(__name__)


class ColumnSpec(BaseModel):
    """One displayed column: source attribute and header label."""

    attribute: str
    label: str

    model_config = {"frozen": True}


class FacetPolicy(BaseModel):
    """Identity, comparison and display rules for one facet.

    Attributes:
        name: Registry name, e.g. ``"provisioning_sync_rules"``.
        heading: Section heading used in the report.
        element_type: Type tag of the elements this facet covers.
        identity: Attributes forming the element key, in key order.
        optional_identity: Identity attributes that contribute an empty
            component when absent instead of triggering the positional
            fallback.
        case_insensitive: Attributes compared (and keyed) case-folded.
        order_sensitive: Multi-valued attributes compared as sequences.
        ignored: Attributes excluded from change detection.
        allow_positional_fallback: Use the sibling index when a required
            identity attribute is missing.
        where: Element is selected only if each attribute's value is in
            the given list.
        where_not: Element is skipped if any attribute's value is in the
            given list.
        columns: Displayed columns, in order (status is appended).
        group_by: Attribute whose value splits rows into subsections.
        groups: Fixed subsection order for ``group_by`` values.
        group_heading: Subsection heading after the group value; defaults
            to ``heading``.
        child: Policy for nested child elements, if any.
    """

    name: str
    heading: str
    element_type: str
    identity: tuple[str, ...]
    optional_identity: frozenset[str] = frozenset()
    case_insensitive: frozenset[str] = frozenset()
    order_sensitive: frozenset[str] = frozenset()
    ignored: frozenset[str] = frozenset()
    allow_positional_fallback: bool = True
    where: dict[str, tuple[str, ...]] = {}
    where_not: dict[str, tuple[str, ...]] = {}
    columns: tuple[ColumnSpec, ...] = ()
    group_by: str | None = None
    groups: tuple[str, ...] = ()
    group_heading: str | None = None
    child: FacetPolicy | None = None

    model_config = {"frozen": True}

    @property
    def column_labels(self) -> list[str]:
        return [c.label for c in self.columns]

    def selects(self, element: ConfigElement) -> bool:
        """Return True if *element* belongs to this facet."""
        if element.element_type != self.element_type:
            return False
        for attribute, allowed in self.where.items():
            if element.get(attribute) not in allowed:
                return False
        for attribute, rejected in self.where_not.items():
            if element.get(attribute) in rejected:
                return False
        return True


def _columns(*pairs: tuple[str, str]) -> tuple[ColumnSpec, ...]:
    return tuple(ColumnSpec(attribute=a, label=label) for a, label in pairs)


# ---------------------------------------------------------------------------
# Nested policies
# ---------------------------------------------------------------------------

ATTRIBUTE_MAPPING_POLICY = FacetPolicy(
    name="attribute_mappings",
    heading="Attribute Mappings",
    element_type="AttributeMapping",
    identity=("source", "target", "flow_type"),
    optional_identity=frozenset({"target", "flow_type"}),
    order_sensitive=frozenset({"source"}),
    columns=_columns(
        ("source", "Source"),
        ("target", "Target"),
        ("flow_type", "Flow Type"),
        ("expression", "Expression"),
    ),
)

RUN_PROFILE_STEP_POLICY = FacetPolicy(
    name="run_profile_steps",
    heading="Run Profile Steps",
    element_type="RunProfileStep",
    identity=("step_number",),
    columns=_columns(
        ("step_number", "Step#"),
        ("step_type", "Step Type"),
        ("partition", "Partition"),
        ("log_file", "Log File"),
        ("threshold_objects", "Number of Objects"),
        ("threshold_deletions", "Number of Deletions"),
    ),
)

PARTITION_PARAMETER_POLICY = FacetPolicy(
    name="partition_parameters",
    heading="Partition Parameters",
    element_type="PartitionParameter",
    identity=("name",),
    allow_positional_fallback=False,
    columns=_columns(
        ("name", "Partition Parameter"),
        ("value", "Configuration"),
        ("encrypted", "Encrypted?"),
    ),
)

# ---------------------------------------------------------------------------
# Connector-level facets
# ---------------------------------------------------------------------------

_SYNC_RULE_COLUMNS = _columns(
    ("name", "Name"),
    ("precedence", "Precedence"),
    ("connector_object_type", "Connected System Object Type"),
    ("metaverse_object_type", "Metaverse Object Type"),
    ("link_type", "Link Type"),
)

_TRUE = ("True", "true", "1")

_SETTING_COLUMNS = _columns(("name", "Setting"), ("value", "Configuration"))
_PARAMETER_COLUMNS = _columns(
    ("name", "Setting"), ("value", "Configuration"), ("encrypted", "Encrypted?")
)


def _sync_rule_policy(
    name: str, heading: str, where: dict[str, tuple[str, ...]] | None = None
) -> FacetPolicy:
    return FacetPolicy(
        name=name,
        heading=heading,
        element_type="SyncRule",
        identity=("name", "direction"),
        ignored=frozenset({"id"}),
        allow_positional_fallback=False,
        where=where or {},
        where_not={"disabled": _TRUE} if where else {},
        columns=_SYNC_RULE_COLUMNS,
        group_by="direction",
        groups=("Inbound", "Outbound"),
        child=ATTRIBUTE_MAPPING_POLICY,
    )


CONNECTOR_POLICY = FacetPolicy(
    name="connectors",
    heading="Connectors",
    element_type="Connector",
    identity=("name",),
    ignored=frozenset({"id", "creation_time", "last_modification_time"}),
    allow_positional_fallback=False,
    columns=_columns(("name", "Connector Name"), ("category", "Connector Type")),
)

FACET_POLICIES: dict[str, FacetPolicy] = {
    policy.name: policy
    for policy in (
        FacetPolicy(
            name="properties",
            heading="Properties",
            element_type="Property",
            identity=("name",),
            columns=_SETTING_COLUMNS,
        ),
        FacetPolicy(
            name="capabilities",
            heading="Connector Capabilities",
            element_type="Capability",
            identity=("name",),
            columns=_SETTING_COLUMNS,
        ),
        FacetPolicy(
            name="connectivity",
            heading="Connectivity Information",
            element_type="ConnectivitySetting",
            identity=("name",),
            columns=_SETTING_COLUMNS,
        ),
        FacetPolicy(
            name="global_parameters",
            heading="Global Parameters",
            element_type="GlobalParameter",
            identity=("name",),
            columns=_PARAMETER_COLUMNS,
        ),
        FacetPolicy(
            name="provisioning_hierarchy",
            heading="Provisioning Hierarchy",
            element_type="HierarchyMapping",
            identity=("dn_component",),
            case_insensitive=frozenset({"dn_component"}),
            columns=_columns(
                ("dn_component", "DN Component"),
                ("object_class", "Object Class Mapping"),
            ),
        ),
        FacetPolicy(
            name="partitions",
            heading="Partitions Information",
            element_type="Partition",
            identity=("name",),
            case_insensitive=frozenset({"name"}),
            columns=_columns(
                ("name", "Partition"),
                ("selected", "Selected"),
                ("inclusions", "Container Inclusions"),
                ("exclusions", "Container Exclusions"),
            ),
        ),
        FacetPolicy(
            name="partitions_hierarchies",
            heading="Partitions and Hierarchies",
            element_type="Partition",
            identity=("name",),
            case_insensitive=frozenset({"name"}),
            allow_positional_fallback=False,
            where={"selected": _TRUE},
            columns=_columns(
                ("name", "Partition"),
                ("inclusions", "Container Inclusions"),
                ("exclusions", "Container Exclusions"),
            ),
            child=PARTITION_PARAMETER_POLICY,
        ),
        FacetPolicy(
            name="object_types",
            heading="Selected Object Types",
            element_type="ObjectType",
            identity=("name",),
            case_insensitive=frozenset({"name"}),
            columns=_columns(("name", "Object Types")),
        ),
        FacetPolicy(
            name="attributes",
            heading="Selected Attributes",
            element_type="Attribute",
            identity=("name",),
            case_insensitive=frozenset({"name"}),
            columns=_columns(
                ("name", "Attribute Name"),
                ("type", "Type"),
                ("multivalued", "Multi-valued"),
                ("flows", "Flows Configured?"),
            ),
        ),
        FacetPolicy(
            name="attribute_flows",
            heading="End-to-End Attribute Flows Summary",
            element_type="AttributeFlow",
            identity=(
                "object_type",
                "flow_direction",
                "metaverse_attribute",
                "data_source_attribute",
                "sync_rule",
            ),
            optional_identity=frozenset({"data_source_attribute", "sync_rule"}),
            case_insensitive=frozenset({"object_type"}),
            order_sensitive=frozenset({"data_source_attribute"}),
            ignored=frozenset({"sync_rule_id"}),
            allow_positional_fallback=False,
            columns=_columns(
                ("object_type", "Object Type"),
                ("data_source_attribute", "Data Source Attribute"),
                ("metaverse_attribute", "Metaverse Attribute"),
                ("sync_rule", "Sync Rule"),
                ("precedence", "Precedence"),
                ("scoping_condition", "Scoping Condition"),
            ),
            group_by="flow_direction",
            groups=("Import", "Export"),
            group_heading="Flows",
        ),
        FacetPolicy(
            name="anchors",
            heading="Anchor Configuration",
            element_type="Anchor",
            identity=("object_type",),
            case_insensitive=frozenset({"object_type"}),
            order_sensitive=frozenset({"attributes"}),
            columns=_columns(
                ("object_type", "Object Type"),
                ("attributes", "Anchor Attributes"),
            ),
        ),
        _sync_rule_policy(
            "provisioning_sync_rules",
            "Provisioning Rules Summary",
            where={"link_type": ("Provision",)},
        ),
        _sync_rule_policy(
            "sticky_join_sync_rules",
            "Sticky Join Rules Summary",
            where={"link_type": ("StickyJoin",)},
        ),
        _sync_rule_policy(
            "conditional_join_sync_rules",
            "Conditional Join Rules Summary",
            where={"link_type": ("Join",)},
        ),
        # both join flavours in one section, for configured facet tables
        _sync_rule_policy(
            "join_sync_rules",
            "Join Rules Summary",
            where={"link_type": ("Join", "StickyJoin")},
        ),
        _sync_rule_policy("standard_sync_rules", "Synchronization Rules"),
        FacetPolicy(
            name="run_profiles",
            heading="Run Profiles",
            element_type="RunProfile",
            identity=("name",),
            allow_positional_fallback=False,
            columns=_columns(("name", "Run Profile")),
            child=RUN_PROFILE_STEP_POLICY,
        ),
    )
}

# ---------------------------------------------------------------------------
# Connector-type facet tables
# ---------------------------------------------------------------------------

_SYNC_RULE_FACETS = [
    "provisioning_sync_rules",
    "sticky_join_sync_rules",
    "conditional_join_sync_rules",
    "standard_sync_rules",
]

DEFAULT_CONNECTOR_TYPE = "EXTENSIBLE2"

CONNECTOR_FACETS: dict[str, list[str]] = {
    "AD": [
        "properties",
        "connectivity",
        "partitions",
        "provisioning_hierarchy",
        "object_types",
        "attributes",
        "attribute_flows",
        *_SYNC_RULE_FACETS,
        "run_profiles",
    ],
    "AAD": [
        "properties",
        "capabilities",
        "connectivity",
        "partitions_hierarchies",
        "object_types",
        "attributes",
        "attribute_flows",
        "anchors",
        *_SYNC_RULE_FACETS,
        "run_profiles",
    ],
    "GENERICSQL": [
        "properties",
        "capabilities",
        "connectivity",
        "global_parameters",
        "partitions_hierarchies",
        "object_types",
        "attributes",
        "attribute_flows",
        "anchors",
        *_SYNC_RULE_FACETS,
        "run_profiles",
    ],
    DEFAULT_CONNECTOR_TYPE: [
        "properties",
        "capabilities",
        "connectivity",
        "global_parameters",
        "provisioning_hierarchy",
        "partitions_hierarchies",
        "object_types",
        "attributes",
        "attribute_flows",
        "anchors",
        *_SYNC_RULE_FACETS,
        "run_profiles",
    ],
}


def get_policy(
    facet: str, registry: dict[str, FacetPolicy] | None = None
) -> FacetPolicy:
    """Return the policy registered under *facet*.

    Args:
        facet: Facet name, e.g. ``"run_profiles"``.
        registry: Alternative registry; defaults to ``FACET_POLICIES``.

    Returns:
        The registered ``FacetPolicy``.

    Raises:
        PolicyMismatchError: If no policy is registered under *facet*.
    """
    policies = FACET_POLICIES if registry is None else registry
    policy = policies.get(facet)
    if policy is None:
        raise PolicyMismatchError(facet, sorted(policies.keys()))
    return policy


def connector_facets(
    category: str | None,
    overrides: dict[str, list[str]] | None = None,
) -> list[str]:
    """Return the ordered facet names documented for a connector category.

    Lookup is case-insensitive.  Unknown categories use the extensible
    connector table.  *overrides* (from configuration) take precedence over
    the built-in tables.
    """
    tables = {k.upper(): v for k, v in CONNECTOR_FACETS.items()}
    if overrides:
        tables.update({k.upper(): list(v) for k, v in overrides.items()})
    key = (category or "").upper()
    if key not in tables:
        logger.debug(
            "No facet table for connector category '%s', using %s",
            category,
            DEFAULT_CONNECTOR_TYPE,
        )
        key = DEFAULT_CONNECTOR_TYPE
    return list(tables[key])
