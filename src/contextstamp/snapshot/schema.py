"""Wire schema for Index and Bundle files.

The context generator writes two kinds of JSON file: one Index object at the
root of a context directory and, per folder, an array of Bundle objects.
Both are validated here at load time so that a wrongly shaped payload
surfaces as a Corrupt error before reconciliation starts.

Every model accepts and keeps unknown keys. ``to_wire`` dumps a model back
to the camelCase form it was read from, without injecting defaults for keys
the file never had.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

Number = int | float


class WireModel(BaseModel):
    """Base for all wire models: camelCase aliases, unknown keys preserved."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


def to_wire(model: BaseModel) -> dict[str, Any]:
    """Serialize a wire model to its JSON-compatible camelCase dict."""
    return model.model_dump(mode="json", by_alias=True, exclude_unset=True)


# =============================================================================
# Index (context_main.json)
# =============================================================================


class TokenEstimates(WireModel):
    # to_camel would produce gpt4OMini
    gpt4o_mini: Number = Field(default=0, alias="gpt4oMini")
    gpt4o_mini_full_code: Number = Field(default=0, alias="gpt4oMiniFullCode")
    claude: Number = 0
    claude_full_code: Number = 0


class IndexSummary(WireModel):
    total_components: int = 0
    total_bundles: int = 0
    total_folders: int = 0
    total_token_estimate: Number = 0
    token_estimates: TokenEstimates | None = None
    missing_dependencies: list[str] | None = None


class FolderMetadata(WireModel):
    """One folder entry of an Index.

    ``bundles`` is the count the generator declared; the Bundle array on
    disk is authoritative and the two may disagree.
    """

    path: str
    bundles: int = 0
    components: list[str] = Field(default_factory=list)
    token_estimate: Number = 0
    is_root: bool | None = None
    root_label: str | None = None


class LogicStampIndex(WireModel):
    schema_uri: str | None = Field(default=None, alias="$schema")
    type: Literal["LogicStampIndex"]
    schema_version: str | None = None
    project_root: str | None = None
    project_root_abs: str | None = None
    summary: IndexSummary = Field(default_factory=IndexSummary)
    folders: list[FolderMetadata] = Field(default_factory=list)
    stats: dict[str, Any] | None = None

    def folder_map(self) -> dict[str, FolderMetadata]:
        """Folders keyed by path, in Index order. A repeated path keeps the last entry."""
        return {folder.path: folder for folder in self.folders}


# =============================================================================
# Contract (graph node payload)
# =============================================================================


class PropType(WireModel):
    type: str | None = None
    optional: bool | None = None
    description: str | None = None


class ContractVersion(WireModel):
    variables: list[str] | None = None
    hooks: list[str] | None = None
    components: list[str] | None = None
    functions: list[str] | None = None
    imports: list[str] | None = None


class LogicSignature(WireModel):
    props: dict[str, PropType | str] = Field(default_factory=dict)
    emits: dict[str, Any] = Field(default_factory=dict)
    state: dict[str, Any] | None = None


class ExportMetadata(WireModel):
    default: str | None = None
    named: list[str] | None = None

    def names(self) -> list[str]:
        """Every exported name: named exports first, then the default."""
        names = list(self.named or [])
        if self.default:
            names.append(self.default)
        return names


class UIFContract(WireModel):
    type: str | None = None
    schema_version: str | None = None
    kind: str | None = None
    entry_id: str | None = None
    entry_path_abs: str | None = None
    entry_path_rel: str | None = None
    description: str | None = None
    version: ContractVersion = Field(default_factory=ContractVersion)
    logic_signature: LogicSignature = Field(default_factory=LogicSignature)
    exports: ExportMetadata | None = None
    semantic_hash: str
    file_hash: str | None = None


# =============================================================================
# Bundle (<folder>/context.json holds a list of these)
# =============================================================================


class GraphNode(WireModel):
    entry_id: str
    contract: UIFContract | None = None
    code_header: str | None = None
    full_code: str | None = None


class GraphEdge(WireModel):
    from_: str = Field(alias="from")
    to: str
    type: str | None = None


class BundleGraph(WireModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)


class BundleMeta(WireModel):
    missing: list[Any] = Field(default_factory=list)
    source: str | None = None


class LogicStampBundle(WireModel):
    schema_uri: str | None = Field(default=None, alias="$schema")
    type: Literal["LogicStampBundle"] | None = None
    schema_version: str | None = None
    position: str = ""
    entry_id: str
    depth: int | None = None
    created_at: str | None = None
    bundle_hash: str
    graph: BundleGraph = Field(default_factory=BundleGraph)
    meta: BundleMeta | None = None

    @property
    def root_node(self) -> GraphNode | None:
        """First graph node, the bundle's root component."""
        return self.graph.nodes[0] if self.graph.nodes else None

    @property
    def root_contract(self) -> UIFContract | None:
        node = self.root_node
        return node.contract if node else None

    @property
    def root_entry_id(self) -> str:
        node = self.root_node
        return node.entry_id if node else self.entry_id


BundleArray: TypeAdapter[list[LogicStampBundle]] = TypeAdapter(list[LogicStampBundle])
"""Validator for a whole Bundle file (a JSON array, never a single object)."""


def parse_index(data: Any) -> LogicStampIndex:
    """Validate a decoded Index payload. Raises pydantic.ValidationError."""
    return LogicStampIndex.model_validate(data)


def parse_bundles(data: Any) -> list[LogicStampBundle]:
    """Validate a decoded Bundle file payload. Raises pydantic.ValidationError."""
    return BundleArray.validate_python(data)
