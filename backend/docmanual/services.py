"""Manual CRUD service: modules, versions, categories, admin users, settings.

Every operation reads a fresh snapshot from the store. Mutations change the
snapshot in memory and write the whole document back; the store rejects the
write with `ConflictError` if someone else wrote in between.

Mutations take the calling `Principal` and check its role here, so the rule
holds for every entry point and not only behind the admin routes.
"""
from __future__ import annotations
from datetime import date, datetime
from typing import List, Optional
import logging
import uuid

from .errors import AuthError, ConflictError, ForbiddenError, InUseError, NotFoundError, ValidationError
from pydantic import ValidationError as SchemaError
from .schemas import (
	ROOT_USER_ID,
	AdminUser,
	AppSettings,
	Category,
	Database,
	Module,
	Principal,
	PublicUser,
	Version,
)
from .security import hash_password, verify_password
from .settings import settings
from .storage import Store, build_store

logger = logging.getLogger(__name__)

EDITORS = ("admin", "editor")
ADMINS = ("admin",)
MIN_PASSWORD_LENGTH = 6

_dummy_hash: Optional[str] = None


def _equalize_timing(password: str) -> None:
	# Unknown usernames pay for one bcrypt verify like a wrong password does
	global _dummy_hash
	if _dummy_hash is None:
		_dummy_hash = hash_password(uuid.uuid4().hex)
	verify_password(password, _dummy_hash)


def require_role(caller: Optional[Principal], roles=EDITORS) -> Principal:
	if caller is None:
		raise AuthError("Authentication required")
	if caller.role not in roles:
		logger.warning("%s (%s) refused: requires %s", caller.username, caller.role, "/".join(roles))
		raise ForbiddenError("You do not have permission to perform this action")
	return caller


def _required(value: Optional[str], label: str) -> str:
	value = (value or "").strip()
	if not value:
		raise ValidationError(f"{label} is required")
	return value


class DocumentationService:
	def __init__(self, store: Store) -> None:
		self.store = store

	def _read(self) -> Database:
		return self.store.read_all()

	def _save(self, db: Database) -> Database:
		return self.store.write_all(db)

	# ---- modules ----

	def list_modules(self) -> List[Module]:
		return self._read().modules

	def get_module(self, module_id: str) -> Optional[Module]:
		db = self._read()
		i = db.module_index(module_id)
		return db.modules[i] if i != -1 else None

	def search_modules(self, query: Optional[str]) -> List[Module]:
		"""Case-insensitive substring match over name, description and tags."""
		modules = self.list_modules()
		needle = (query or "").strip().lower()
		if not needle:
			return modules
		return [
			m for m in modules
			if needle in m.name.lower()
			or needle in m.description.lower()
			or any(needle in t.lower() for t in m.tags)
		]

	def get_welcome_module(self) -> Optional[Module]:
		modules = self.list_modules()
		for m in modules:
			if m.is_welcome:
				return m
		return modules[0] if modules else None

	def _check_module(self, db: Database, module: Module) -> None:
		module.id = _required(module.id, "Module id")
		_required(module.name, "Name")
		_required(module.category, "Category")
		if module.category not in db.category_names():
			raise ValidationError(f'Category "{module.category}" does not exist.')

	def _single_welcome(self, db: Database, module: Module) -> None:
		if not module.is_welcome:
			return
		for other in db.modules:
			if other.id != module.id and other.is_welcome:
				other.is_welcome = False
				logger.info("module %s is no longer the welcome module", other.id)

	def create_module(self, caller: Optional[Principal], module: Module) -> Module:
		require_role(caller, EDITORS)
		db = self._read()
		self._check_module(db, module)
		if db.module_index(module.id) != -1:
			raise ConflictError(f'Module "{module.id}" already exists.')
		self._single_welcome(db, module)
		db.modules.append(module)
		self._save(db)
		logger.info("%s created module %s", caller.username, module.id)
		return module

	def update_module(self, caller: Optional[Principal], module: Module) -> Module:
		"""Replace the stored module with the same id; callers send the full record."""
		require_role(caller, EDITORS)
		db = self._read()
		module.id = _required(module.id, "Module id")
		i = db.module_index(module.id)
		if i == -1:
			raise NotFoundError(f'Module "{module.id}" not found.')
		self._check_module(db, module)
		self._single_welcome(db, module)
		db.modules[i] = module
		self._save(db)
		logger.info("%s updated module %s", caller.username, module.id)
		return module

	def delete_module(self, caller: Optional[Principal], module_id: str) -> bool:
		require_role(caller, EDITORS)
		db = self._read()
		i = db.module_index(module_id)
		if i == -1:
			return False
		del db.modules[i]
		self._save(db)
		logger.info("%s deleted module %s", caller.username, module_id)
		return True

	# ---- versions (embedded in a module) ----

	def _module_for_versions(self, db: Database, module_id: str) -> Module:
		i = db.module_index(module_id)
		if i == -1:
			raise NotFoundError(f'Module "{module_id}" not found.')
		return db.modules[i]

	def _check_version(self, version: Version) -> Version:
		version.version = _required(version.version, "Version number")
		if not version.changes:
			raise ValidationError("At least one change is required.")
		for change in version.changes:
			_required(change.description, "Change description")
		if not version.date:
			version.date = date.today().isoformat()
		try:
			parsed = datetime.strptime(version.date, "%Y-%m-%d")
		except ValueError:
			parsed = None
		if parsed is None or parsed.strftime("%Y-%m-%d") != version.date:
			raise ValidationError(f'Version date "{version.date}" must be YYYY-MM-DD.')
		return version

	def add_version(self, caller: Optional[Principal], module_id: str, version: Version) -> Module:
		require_role(caller, EDITORS)
		db = self._read()
		module = self._module_for_versions(db, module_id)
		self._check_version(version)
		if any(v.version == version.version for v in module.versions):
			raise ConflictError(f'Version "{version.version}" already exists for {module.name}.')
		# newest first
		module.versions.insert(0, version)
		self._save(db)
		logger.info("%s added v%s to %s", caller.username, version.version, module_id)
		return module

	def update_version(self, caller: Optional[Principal], module_id: str, version_key: str, version: Version) -> Module:
		require_role(caller, EDITORS)
		db = self._read()
		module = self._module_for_versions(db, module_id)
		idx = next((i for i, v in enumerate(module.versions) if v.version == version_key), -1)
		if idx == -1:
			raise NotFoundError(f'Version "{version_key}" not found for {module.name}.')
		if not version.date:
			version.date = module.versions[idx].date
		self._check_version(version)
		if version.version != version_key and any(v.version == version.version for v in module.versions):
			raise ConflictError(f'Version "{version.version}" already exists for {module.name}.')
		module.versions[idx] = version
		self._save(db)
		logger.info("%s updated v%s of %s", caller.username, version_key, module_id)
		return module

	def delete_version(self, caller: Optional[Principal], module_id: str, version_key: str) -> bool:
		require_role(caller, EDITORS)
		db = self._read()
		module = self._module_for_versions(db, module_id)
		kept = [v for v in module.versions if v.version != version_key]
		if len(kept) == len(module.versions):
			return False
		module.versions = kept
		self._save(db)
		logger.info("%s deleted v%s of %s", caller.username, version_key, module_id)
		return True

	# ---- categories ----

	def list_categories(self) -> List[Category]:
		return self._read().categories

	def create_category(self, caller: Optional[Principal], name: str) -> Category:
		require_role(caller, ADMINS)
		name = _required(name, "Category name")
		db = self._read()
		if name in db.category_names():
			raise ConflictError(f'Category "{name}" already exists.')
		category = Category(name=name)
		db.categories.append(category)
		self._save(db)
		logger.info("%s created category %r", caller.username, name)
		return category

	def update_category(self, caller: Optional[Principal], old_name: str, new_name: str) -> Category:
		require_role(caller, ADMINS)
		new_name = _required(new_name, "Category name")
		db = self._read()
		names = db.category_names()
		if old_name not in names:
			raise NotFoundError(f'Category "{old_name}" not found.')
		if new_name != old_name and new_name in names:
			raise ConflictError(f'Category "{new_name}" already exists.')
		db.categories[names.index(old_name)] = Category(name=new_name)
		moved = 0
		for module in db.modules:
			if module.category == old_name:
				module.category = new_name
				moved += 1
		self._save(db)
		logger.info("%s renamed category %r to %r (%d modules)", caller.username, old_name, new_name, moved)
		return Category(name=new_name)

	def delete_category(self, caller: Optional[Principal], name: str) -> bool:
		require_role(caller, ADMINS)
		db = self._read()
		if any(m.category == name for m in db.modules):
			raise InUseError(f'Category "{name}" is in use and cannot be deleted.')
		names = db.category_names()
		if name not in names:
			raise NotFoundError(f'Category "{name}" not found.')
		del db.categories[names.index(name)]
		self._save(db)
		logger.info("%s deleted category %r", caller.username, name)
		return True

	def reorder_categories(self, caller: Optional[Principal], names: List[str]) -> List[Category]:
		require_role(caller, ADMINS)
		db = self._read()
		current = db.category_names()
		if len(names) != len(set(names)) or sorted(names) != sorted(current):
			raise ValidationError("New order must list every existing category exactly once.")
		db.categories = [Category(name=n) for n in names]
		self._save(db)
		logger.info("%s reordered categories", caller.username)
		return db.categories

	# ---- admin users ----

	def list_admin_users(self, caller: Optional[Principal]) -> List[PublicUser]:
		require_role(caller, ADMINS)
		return [u.public() for u in self._read().users]

	def _check_role(self, role: str) -> str:
		if role not in EDITORS:
			raise ValidationError(f"Role must be one of: {', '.join(EDITORS)}")
		return role

	def _check_password(self, password: Optional[str]) -> str:
		if not password or len(password) < MIN_PASSWORD_LENGTH:
			raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
		return password

	def create_admin_user(self, caller: Optional[Principal], username: str, password: str, role: str = "editor") -> PublicUser:
		require_role(caller, ADMINS)
		username = _required(username, "Username")
		self._check_password(password)
		self._check_role(role)
		db = self._read()
		if any(u.username == username for u in db.users):
			raise ConflictError(f'User "{username}" already exists.')
		user = AdminUser(id=f"user-{uuid.uuid4().hex[:12]}", username=username, password=hash_password(password), role=role)
		db.users.append(user)
		self._save(db)
		logger.info("%s created %s user %s", caller.username, role, username)
		return user.public()

	def update_admin_user(
		self,
		caller: Optional[Principal],
		user_id: str,
		username: str,
		role: str,
		password: Optional[str] = None,
	) -> PublicUser:
		"""Set username and role; the password changes only when a new one is given."""
		require_role(caller, ADMINS)
		username = _required(username, "Username")
		self._check_role(role)
		db = self._read()
		i = db.user_index(user_id)
		if i == -1:
			raise NotFoundError(f'User "{user_id}" not found.')
		if user_id == ROOT_USER_ID and role != "admin":
			raise ForbiddenError("The root user must keep the admin role.")
		if any(u.username == username and u.id != user_id for u in db.users):
			raise ConflictError(f'User "{username}" already exists.')
		user = db.users[i]
		user.username = username
		user.role = role
		if password:
			user.password = hash_password(self._check_password(password))
		self._save(db)
		logger.info("%s updated user %s", caller.username, user_id)
		return user.public()

	def delete_admin_user(self, caller: Optional[Principal], user_id: str) -> bool:
		if user_id == ROOT_USER_ID:
			raise ForbiddenError("The root user cannot be deleted.")
		require_role(caller, ADMINS)
		db = self._read()
		i = db.user_index(user_id)
		if i == -1:
			raise NotFoundError(f'User "{user_id}" not found.')
		del db.users[i]
		self._save(db)
		logger.info("%s deleted user %s", caller.username, user_id)
		return True

	def change_password(self, caller: Optional[Principal], current_password: str, new_password: str) -> None:
		require_role(caller, EDITORS)
		db = self._read()
		i = db.user_index(caller.id)
		if i == -1:
			raise AuthError("Your account no longer exists.")
		user = db.users[i]
		if not verify_password(current_password or "", user.password):
			logger.warning("password change refused for %s: wrong current password", caller.username)
			raise AuthError("Current password is incorrect.")
		user.password = hash_password(self._check_password(new_password))
		self._save(db)
		logger.info("%s changed their password", caller.username)

	def login_user(self, username: str, password: str) -> Optional[PublicUser]:
		"""The public user on success, None for unknown user or wrong password alike."""
		user = next((u for u in self._read().users if u.username == username), None)
		if user is None:
			_equalize_timing(password or "")
			return None
		if not verify_password(password or "", user.password):
			return None
		return user.public()

	def ensure_root_user(self, username: Optional[str], password: Optional[str]) -> Optional[PublicUser]:
		"""Create the undeletable root admin when the store has no users yet."""
		if not username or not password:
			return None
		db = self._read()
		if db.users:
			return None
		root = AdminUser(id=ROOT_USER_ID, username=username, password=hash_password(password), role="admin")
		db.users.append(root)
		self._save(db)
		logger.info("bootstrapped root user %s", username)
		return root.public()

	# ---- settings ----

	def get_app_settings(self) -> AppSettings:
		return self._read().settings

	def update_app_settings(self, caller: Optional[Principal], changes: dict) -> AppSettings:
		require_role(caller, ADMINS)
		unknown = set(changes) - set(AppSettings.model_fields)
		if unknown:
			raise ValidationError(f"Unknown settings: {', '.join(sorted(unknown))}")
		db = self._read()
		if "app_name" in changes and changes["app_name"] is None:
			raise ValidationError("App name is required")
		try:
			merged = AppSettings(**{**db.settings.model_dump(), **changes})
		except SchemaError as err:
			raise ValidationError(f"Invalid settings: {err.errors()[0]['msg']}") from err
		merged.app_name = _required(merged.app_name, "App name")
		db.settings = merged
		self._save(db)
		logger.info("%s updated app settings", caller.username)
		return merged


_service: Optional[DocumentationService] = None


def get_service() -> DocumentationService:
	global _service
	if _service is None:
		_service = DocumentationService(build_store(settings))
	return _service
