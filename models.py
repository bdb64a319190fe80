"""
models.py — Python dataclasses for the gall catalogue.

Maps to the SQLite tables created in database.py. Optional facets use None
for "absent"; an empty string is a present value.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, List, Tuple, Dict, Any


GALL_TAXON = 'gall'
HOST_TAXON = 'plant'


@dataclass
class Family:
    """Taxonomic family. description is 'Plant' for host families."""
    id: Optional[int] = None
    name: str = ""
    description: str = ""


@dataclass
class Species:
    """A gall maker or host plant."""
    id: Optional[int] = None
    taxoncode: str = ""
    name: str = ""
    genus: str = ""
    family_id: Optional[int] = None
    description: Optional[str] = None
    commonnames: Optional[str] = None
    synonyms: Optional[str] = None
    abundance: Optional[str] = None

    @property
    def is_gall(self) -> bool:
        return self.taxoncode == GALL_TAXON


# ========================================
# Facet values
# ========================================

@dataclass
class Alignment:
    id: Optional[int] = None
    alignment: str = ""
    description: Optional[str] = None


@dataclass
class Cells:
    id: Optional[int] = None
    cells: str = ""
    description: Optional[str] = None


@dataclass
class Color:
    id: Optional[int] = None
    color: str = ""


@dataclass
class Shape:
    id: Optional[int] = None
    shape: str = ""
    description: Optional[str] = None


@dataclass
class Walls:
    id: Optional[int] = None
    walls: str = ""
    description: Optional[str] = None


@dataclass
class GallLocation:
    id: Optional[int] = None
    loc: str = ""
    description: Optional[str] = None


@dataclass
class GallTexture:
    id: Optional[int] = None
    tex: str = ""
    description: Optional[str] = None


@dataclass
class GallProperties:
    """Physical attributes of a gall, the facets the ID page filters on."""
    alignment: Optional[Alignment] = None
    cells: Optional[Cells] = None
    color: Optional[Color] = None
    shape: Optional[Shape] = None
    walls: Optional[Walls] = None
    detachable: Optional[int] = None
    galllocation: List[GallLocation] = field(default_factory=list)
    galltexture: List[GallTexture] = field(default_factory=list)


@dataclass
class Gall:
    """A gall species with its family, hosts and physical attributes."""
    id: Optional[int] = None
    name: str = ""
    genus: str = ""
    family: Optional[Family] = None
    description: Optional[str] = None
    commonnames: Optional[str] = None
    synonyms: Optional[str] = None
    abundance: Optional[str] = None
    gall: GallProperties = field(default_factory=GallProperties)
    hosts: List[Species] = field(default_factory=list)
    taxoncode: str = GALL_TAXON

    def to_dict(self) -> Dict[str, Any]:
        """Plain structure for JSON responses."""
        return asdict(self)


@dataclass(frozen=True)
class SearchQuery:
    """
    One filtering pass on the ID page.

    Single facets are None when unconstrained; list facets are empty tuples.
    host holds the host name or genus the candidate list was loaded for.
    """
    alignment: Optional[str] = None
    cells: Optional[str] = None
    color: Optional[str] = None
    detachable: Optional[str] = None
    host: str = ""
    locations: Tuple[str, ...] = ()
    shape: Optional[str] = None
    textures: Tuple[str, ...] = ()
    walls: Optional[str] = None


@dataclass
class GlossaryEntry:
    id: Optional[int] = None
    word: str = ""
    definition: str = ""
    urls: str = ""  # newline separated

    @property
    def url_list(self) -> List[str]:
        return [u.strip() for u in self.urls.split('\n') if u.strip()]
