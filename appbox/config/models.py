"""App configuration models (the parsed form of an app's config file)."""

import copy
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ImageConfig(_CamelModel):
    """Image reference or build descriptor."""

    name: Optional[str] = Field(default=None, description="Image name (e.g., 'kalabox/nginx')")
    build: bool = Field(default=False, description="Build the image from src_root")
    src_root: Optional[str] = Field(default=None, description="Directory holding the Dockerfile")


class ComponentSpec(_CamelModel):
    """Raw spec of one component. Unknown fields are kept."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    image: ImageConfig = Field(default_factory=ImageConfig)
    install_options: Dict[str, Any] = Field(default_factory=dict)
    start_options: Dict[str, Any] = Field(default_factory=dict)

    def extra_fields(self) -> Dict[str, Any]:
        return copy.deepcopy(dict(self.model_extra or {}))


class AppConfig(_CamelModel):
    """Resolved configuration of one app."""

    app_name: str
    domain: str
    home: str
    app_root: str
    app_cids_root: str
    src_root: str
    code_dir: str = "code"
    app_components: Dict[str, ComponentSpec] = Field(default_factory=dict)
    app_plugins: List[str] = Field(default_factory=list)

    # Filled in by app assembly
    home_bind: Optional[str] = None
    code_root: Optional[str] = None
