"""
Request payload models.

Bodies arrive in the client's camelCase; fields are snake_case here and
dumped back with ``by_alias=True`` so stored records keep the wire names.
Create models apply defaults; Update models leave out fields the client did
not send (or sent as null) so a partial PUT only touches what changed.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .utils.repository import is_valid_id

Visibility = Literal["private", "public"]
PlotStructure = Literal["three_act", "five_act", "hero_journey", "custom"]
PlotPointType = Literal[
    "exposition", "rising_action", "climax", "falling_action", "resolution",
    "setup", "conflict", "twist", "revelation",
]
LocationType = Literal["city", "building", "country", "region", "room", "landscape", "other"]
LocationImportance = Literal["primary", "secondary", "minor"]
RewriteTone = Literal["whimsical", "serious", "mysterious", "humorous", "dramatic", "adventurous", "neutral"]
RewriteStyle = Literal[
    "narrative", "descriptive", "dialogue-heavy", "action-focused", "emotional", "minimalist", "poetic",
]

TITLE_MAX_LENGTH = 200
NAME_MAX_LENGTH = 100
REWRITE_MIN_LENGTH = 10
REWRITE_MAX_LENGTH = 1000


def _check_id(value: str) -> str:
    if not is_valid_id(value):
        raise ValueError("Invalid ID format")
    return value


ObjectIdStr = Annotated[str, AfterValidator(_check_id)]


class ApiModel(BaseModel):
    """Base for all payload models."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    def to_record(self, partial: bool = False) -> Dict[str, Any]:
        """
        Dump with wire names.

        Args:
            partial: Drop top-level fields that were not sent or were sent as null.
                List items are always dumped whole so they keep their defaults.

        Returns:
            Dictionary ready to merge into a stored record
        """
        if not partial:
            return self.model_dump(by_alias=True)
        record = self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
        for name, field in type(self).model_fields.items():
            key = field.alias or name
            value = getattr(self, name)
            if key in record and isinstance(value, list):
                record[key] = [v.to_record() if isinstance(v, ApiModel) else v for v in value]
        return record


# Documents

class DocumentCreate(ApiModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = ""
    visibility: Visibility = "private"
    enable_character_tracking: bool = False


class DocumentUpdate(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    content: Optional[str] = None
    visibility: Optional[Visibility] = None
    enable_character_tracking: Optional[bool] = None


# Stories

class StoryMode(ApiModel):
    narrative: int = Field(default=50, ge=0, le=100)
    dialogue: int = Field(default=50, ge=0, le=100)


# Characters

class Relationship(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    character: ObjectIdStr
    relationship_type: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str = ""


class Appearance(ApiModel):
    excerpt: str = ""
    position: int = Field(default=0, ge=0)


class CharacterMetadata(ApiModel):
    model_config = ConfigDict(extra="allow")

    age: Optional[Union[int, str]] = None
    gender: Optional[str] = None
    occupation: Optional[str] = None


class CharacterCreate(ApiModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    document: ObjectIdStr
    description: str = ""
    traits: List[str] = Field(default_factory=list)
    relationships: List[Relationship] = Field(default_factory=list)
    backstory: str = ""
    notes: str = ""
    appearances: List[Appearance] = Field(default_factory=list)
    metadata: CharacterMetadata = Field(default_factory=CharacterMetadata)


class CharacterUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    description: Optional[str] = None
    traits: Optional[List[str]] = None
    relationships: Optional[List[Relationship]] = None
    backstory: Optional[str] = None
    notes: Optional[str] = None
    appearances: Optional[List[Appearance]] = None
    metadata: Optional[CharacterMetadata] = None


class TrackingToggle(ApiModel):
    enabled: bool


# Plot

class PlotPointInput(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = ""
    type: PlotPointType = "setup"
    involved_characters: List[ObjectIdStr] = Field(default_factory=list)
    order: Optional[int] = None


class PlotPointUpdate(ApiModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = None
    type: Optional[PlotPointType] = None
    involved_characters: Optional[List[ObjectIdStr]] = None
    order: Optional[int] = None


class PlotUpdate(ApiModel):
    structure: Optional[PlotStructure] = None
    plot_points: Optional[List[PlotPointInput]] = None
    main_conflict: Optional[str] = None
    main_conflict_characters: Optional[List[ObjectIdStr]] = None
    synopsis: Optional[str] = None


# Setting

class LocationInput(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str = ""
    type: LocationType = "other"
    importance: LocationImportance = "secondary"


class LocationUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    description: Optional[str] = None
    type: Optional[LocationType] = None
    importance: Optional[LocationImportance] = None


class TimelineInput(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    period: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str = ""
    order: Optional[int] = None


class TimelineUpdate(ApiModel):
    period: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    description: Optional[str] = None
    order: Optional[int] = None


class SettingUpdate(ApiModel):
    main_location: Optional[str] = None
    time_period: Optional[str] = None
    locations: Optional[List[LocationInput]] = None
    timeline: Optional[List[TimelineInput]] = None
    world_details: Optional[str] = None


# Themes

class MainThemeInput(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str = ""
    exploration: str = ""


class MainThemeUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    description: Optional[str] = None
    exploration: Optional[str] = None


class MotifInput(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str = ""
    purpose: str = ""


class MotifUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    description: Optional[str] = None
    purpose: Optional[str] = None


class SymbolOccurrence(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    context: str = Field(min_length=1)
    significance: str = ""


class SymbolInput(ApiModel):
    id: Optional[str] = Field(default=None, alias="_id")
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    meaning: str = ""
    occurrences: List[SymbolOccurrence] = Field(default_factory=list)


class SymbolUpdate(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    meaning: Optional[str] = None
    occurrences: Optional[List[SymbolOccurrence]] = None


class ThemeUpdate(ApiModel):
    main_themes: Optional[List[MainThemeInput]] = None
    motifs: Optional[List[MotifInput]] = None
    symbols: Optional[List[SymbolInput]] = None


# Reordering

class ReorderRequest(ApiModel):
    order: List[ObjectIdStr]


# AI

class RewriteOptions(ApiModel):
    tone: RewriteTone = "neutral"
    style: RewriteStyle = "narrative"
    audience: str = Field(default="general", min_length=1, max_length=NAME_MAX_LENGTH)
    pacing: int = Field(default=50, ge=0, le=100)
    keep_context: bool = True
    is_preview: bool = False


class RewriteRequest(ApiModel):
    text: str = Field(min_length=REWRITE_MIN_LENGTH, max_length=REWRITE_MAX_LENGTH)
    options: RewriteOptions = Field(default_factory=RewriteOptions)
    document_id: Optional[ObjectIdStr] = None


class Scene(ApiModel):
    model_config = ConfigDict(extra="allow")

    title: str = ""
    location: str = ""
    time_of_day: str = ""
    characters: List[str] = Field(default_factory=list)
    description: str = ""


class AnalyzeStoryRequest(ApiModel):
    document_id: Optional[ObjectIdStr] = None
    content: str = Field(min_length=1)
    scenes: List[Scene] = Field(default_factory=list)


class AnalyzeSceneRequest(ApiModel):
    document_id: Optional[ObjectIdStr] = None
    scene: Scene
    content: str = ""
