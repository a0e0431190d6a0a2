from __future__ import annotations
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


SCHEMA_VERSION = 2
ROOT_USER_ID = "user-root"

Role = Literal["admin", "editor"]
ChangeType = Literal["new", "improvement", "fix"]


class Record(BaseModel):
	# Stored and served with camelCase keys (isWelcome, appName, ...)
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class VersionChange(Record):
	type: ChangeType
	description: str
	image: Optional[str] = None


class Version(Record):
	version: str
	date: str = ""
	changes: List[VersionChange] = Field(default_factory=list)


class Module(Record):
	id: str
	name: str
	category: str
	tags: List[str] = Field(default_factory=list)
	description: str = ""
	content: str = ""
	image: Optional[str] = None
	versions: List[Version] = Field(default_factory=list)
	is_welcome: bool = False


class Category(Record):
	name: str


class PublicUser(Record):
	id: str
	username: str
	role: Role


class AdminUser(PublicUser):
	password: str

	def public(self) -> PublicUser:
		return PublicUser(id=self.id, username=self.username, role=self.role)


class AppSettings(Record):
	app_name: str = "Module Manual"
	app_subtitle: Optional[str] = None


class Database(Record):
	schema_version: int = SCHEMA_VERSION
	revision: int = 0
	modules: List[Module] = Field(default_factory=list)
	categories: List[Category] = Field(default_factory=list)
	users: List[AdminUser] = Field(default_factory=list)
	settings: AppSettings = Field(default_factory=AppSettings)

	@model_validator(mode="before")
	@classmethod
	def _upgrade(cls, data: Any) -> Any:
		if not isinstance(data, dict):
			return data
		data = dict(data)
		# v1 documents stored categories as bare strings
		categories = data.get("categories") or []
		data["categories"] = [{"name": c} if isinstance(c, str) else c for c in categories]
		if data.get("settings") is None:
			data.pop("settings", None)
		if data.get("users") is None:
			data["users"] = []
		data["schemaVersion"] = SCHEMA_VERSION
		data.pop("schema_version", None)
		return data

	def dump(self) -> dict:
		return self.model_dump(by_alias=True, mode="json")

	def category_names(self) -> List[str]:
		return [c.name for c in self.categories]

	def module_index(self, module_id: str) -> int:
		for i, m in enumerate(self.modules):
			if m.id == module_id:
				return i
		return -1

	def user_index(self, user_id: str) -> int:
		for i, u in enumerate(self.users):
			if u.id == user_id:
				return i
		return -1


class Principal(BaseModel):
	"""The caller resolved from a session."""
	id: str
	username: str
	role: Role

	@property
	def is_admin(self) -> bool:
		return self.role == "admin"
