"""FastAPI dependencies for the shared store, session and services.

The store and the application session are created once in the app lifespan
and kept on ``app.state``; services are cheap and built per request.
"""

from fastapi import Depends, Request

from prontuario.repositories import RecordStore
from prontuario.services.backup import BackupEngine
from prontuario.services.directory import PatientDirectory
from prontuario.services.session import AppSession
from prontuario.services.timeline import Timeline


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_app_session(request: Request) -> AppSession:
    return request.app.state.session


def get_directory(store: RecordStore = Depends(get_store)) -> PatientDirectory:
    return PatientDirectory(store)


def get_timeline(
    store: RecordStore = Depends(get_store),
    directory: PatientDirectory = Depends(get_directory),
) -> Timeline:
    return Timeline(store, directory)


def get_backup_engine(store: RecordStore = Depends(get_store)) -> BackupEngine:
    return BackupEngine(store)
