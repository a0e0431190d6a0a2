"""Persistence providers for the manual database.

A store hands out fresh `Database` snapshots and accepts whole-document
writes. Writes are compare-and-swap on `Database.revision`: a snapshot can
only be written back if nobody else wrote since it was read, otherwise the
writer gets a `ConflictError` and may re-read and retry.
"""
from __future__ import annotations
import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError as SchemaError
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .db import Base, make_engine
from .errors import ConflictError, StorageError
from .models import StoredDocument
from .schemas import Database

logger = logging.getLogger(__name__)

_DOCUMENT_ID = 1


def _conflict() -> ConflictError:
	return ConflictError("The manual was modified concurrently; reload and try again")


class Store:
	def read_all(self) -> Database:
		raise NotImplementedError

	def write_all(self, db: Database) -> Database:
		raise NotImplementedError


class JsonFileStore(Store):
	"""The flat JSON file database."""

	def __init__(self, path: str | os.PathLike) -> None:
		self.path = Path(path)
		self._lock = threading.Lock()

	def _load(self) -> Database:
		try:
			raw = self.path.read_text(encoding="utf-8")
		except FileNotFoundError:
			return Database()
		except OSError as err:
			logger.error("could not read %s", self.path, exc_info=True)
			raise StorageError(f"Could not read from database: {err}") from err
		if not raw.strip():
			return Database()
		try:
			return Database.model_validate(json.loads(raw))
		except (ValueError, SchemaError) as err:
			logger.error("malformed database file %s", self.path, exc_info=True)
			raise StorageError(f"Malformed database file {self.path}") from err

	def read_all(self) -> Database:
		return self._load()

	def write_all(self, db: Database) -> Database:
		with self._lock:
			current = self._load().revision
			if current != db.revision:
				logger.warning("write rejected: read at revision %s, stored revision is %s", db.revision, current)
				raise _conflict()
			saved = db.model_copy(update={"revision": db.revision + 1})
			text = json.dumps(saved.dump(), indent=2, ensure_ascii=False)
			try:
				self.path.parent.mkdir(parents=True, exist_ok=True)
				fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".db-", suffix=".json")
				try:
					with os.fdopen(fd, "w", encoding="utf-8") as fh:
						fh.write(text)
					os.replace(tmp, self.path)
				except BaseException:
					if os.path.exists(tmp):
						os.unlink(tmp)
					raise
			except OSError as err:
				logger.error("could not write %s", self.path, exc_info=True)
				raise StorageError(f"Could not write to database: {err}") from err
		return saved


class SqlDocumentStore(Store):
	"""Keeps the JSON document in a single SQL row; the revision column is the CAS guard."""

	def __init__(self, engine) -> None:
		self.engine = engine
		Base.metadata.create_all(bind=engine, tables=[StoredDocument.__table__])

	def read_all(self) -> Database:
		try:
			with Session(self.engine) as session:
				row = session.get(StoredDocument, _DOCUMENT_ID)
				if row is None:
					return Database()
				payload, revision = row.payload, row.revision
		except SQLAlchemyError as err:
			logger.error("could not read document row", exc_info=True)
			raise StorageError(f"Could not read from database: {err}") from err
		try:
			db = Database.model_validate(json.loads(payload))
		except (ValueError, SchemaError) as err:
			raise StorageError("Malformed stored document") from err
		return db.model_copy(update={"revision": revision})

	def write_all(self, db: Database) -> Database:
		saved = db.model_copy(update={"revision": db.revision + 1})
		payload = json.dumps(saved.dump(), ensure_ascii=False)
		try:
			with Session(self.engine) as session:
				res = session.execute(
					update(StoredDocument)
					.where(StoredDocument.id == _DOCUMENT_ID, StoredDocument.revision == db.revision)
					.values(revision=saved.revision, payload=payload, updated_at=datetime.utcnow())
				)
				if not res.rowcount:
					if db.revision != 0:
						raise _conflict()
					session.add(StoredDocument(id=_DOCUMENT_ID, revision=saved.revision, payload=payload))
				session.commit()
		except IntegrityError:
			# another writer created the first row
			raise _conflict()
		except SQLAlchemyError as err:
			logger.error("could not write document row", exc_info=True)
			raise StorageError(f"Could not write to database: {err}") from err
		return saved


def build_store(cfg) -> Store:
	backend = (cfg.storage_backend or "json").lower()
	if backend == "json":
		return JsonFileStore(cfg.data_file)
	if backend == "sql":
		return SqlDocumentStore(make_engine(cfg.database_url or "sqlite:///./docmanual.db"))
	raise ValueError(f"Unknown STORAGE_BACKEND {cfg.storage_backend!r}")
