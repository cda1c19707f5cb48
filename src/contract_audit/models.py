"""Structured models for resolved contract source."""

from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import ProxyPartialError

SourceRole = Literal["plain", "proxy", "implementation"]

ROLE_PLAIN: SourceRole = "plain"
ROLE_PROXY: SourceRole = "proxy"
ROLE_IMPLEMENTATION: SourceRole = "implementation"

DEFAULT_OPTIMIZER_RUNS = 200

DEFAULT_OUTPUT_SELECTION = {
    "*": {
        "*": [
            "evm.bytecode",
            "evm.deployedBytecode",
            "devdoc",
            "userdoc",
            "metadata",
            "abi",
        ]
    }
}


class SourceFile(BaseModel):
    """
    One source file of a bundle. `path` is the identity used for ordering and
    for citing findings; `name` is its last segment.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    content: str
    role: SourceRole = ROLE_PLAIN


class OptimizerSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    enabled: bool = False
    runs: int = DEFAULT_OPTIMIZER_RUNS


class CompilerSettings(BaseModel):
    """Solidity compiler settings, either explorer-reported or synthesized from flat fields."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    optimizer: OptimizerSettings = Field(default_factory=OptimizerSettings)
    remappings: List[str] = Field(default_factory=list)
    output_selection: Dict[str, Any] = Field(default_factory=dict, alias="outputSelection")
    metadata: Optional[Dict[str, Any]] = None
    evm_version: Optional[str] = Field(default=None, alias="evmVersion")

    def to_solc_json(self) -> Dict[str, Any]:
        """Settings in the Standard-JSON-Input key convention."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ContractBundle(BaseModel):
    """
    Normalized, role-tagged source plus metadata for one resolution request.

    Built once, complete, and immutable afterwards.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    address: str
    chain_id: Optional[int] = None
    contract_name: str
    compiler_version: str = ""
    files: Tuple[SourceFile, ...]
    settings: CompilerSettings
    abi: List[Any] = Field(default_factory=list)
    implementation_abi: List[Any] = Field(default_factory=list)
    is_proxy: bool = False
    implementation_address: Optional[str] = None
    # Set when the proxy shell resolved but its implementation did not
    proxy_partial: Optional[ProxyPartialError] = Field(default=None, exclude=True)

    @model_validator(mode="after")
    def _check_files(self) -> "ContractBundle":
        if not self.files:
            raise ValueError("bundle must contain at least one source file")
        paths = [f.path for f in self.files]
        duplicates = sorted({p for p in paths if paths.count(p) > 1})
        if duplicates:
            raise ValueError(f"duplicate source paths in bundle: {duplicates}")
        return self

    @property
    def is_partial(self) -> bool:
        return self.proxy_partial is not None

    def files_with_role(self, role: SourceRole) -> List[SourceFile]:
        return [f for f in self.files if f.role == role]

    def to_summary(self) -> Dict[str, Any]:
        """JSON-friendly view of the bundle (file contents included)."""
        return {
            "address": self.address,
            "chain_id": self.chain_id,
            "contract_name": self.contract_name,
            "compiler_version": self.compiler_version,
            "is_proxy": self.is_proxy,
            "implementation_address": self.implementation_address,
            "implementation_error": str(self.proxy_partial) if self.proxy_partial else None,
            "settings": self.settings.to_solc_json(),
            "optimization": self.settings.optimizer.enabled,
            "runs": self.settings.optimizer.runs,
            "abi": self.abi,
            "implementation_abi": self.implementation_abi,
            "files": [f.model_dump() for f in self.files],
        }
