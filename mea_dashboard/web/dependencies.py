from __future__ import annotations

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session, sessionmaker
from starlette.requests import HTTPConnection

from mea_dashboard.application.live import ChangeFeed
from mea_dashboard.application.repository import AssessmentRepository
from mea_dashboard.infrastructure.config import DatabaseConfig, get_settings
from mea_dashboard.infrastructure.db import (
    create_database_engine,
    create_session_factory,
    initialise_database,
)
from mea_dashboard.infrastructure.exceptions import AuthenticationError, ConfigurationError
from mea_dashboard.infrastructure.identity import Identity, IdentityProvider

AUTH_HEADER = "X-Auth-Token"


def get_db_config(connection: HTTPConnection) -> DatabaseConfig:
    config = getattr(connection.app.state, "db_config", None)
    if config is None:
        try:
            config = get_settings().database
        except ConfigurationError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=exc.user_message
            ) from exc
        connection.app.state.db_config = config
    return config


def get_session_factory(connection: HTTPConnection) -> sessionmaker[Session]:
    config = get_db_config(connection)
    cached_factory = getattr(connection.app.state, "session_factory", None)
    cached_config = getattr(connection.app.state, "session_factory_config", None)

    current_config_dict = config.model_dump()

    if cached_factory is not None and cached_config == current_config_dict:
        return cached_factory

    engine = create_database_engine(config)
    initialise_database(engine)
    session_factory = create_session_factory(engine)

    connection.app.state.session_factory = session_factory
    connection.app.state.session_factory_config = current_config_dict

    return session_factory


def get_change_feed(connection: HTTPConnection) -> ChangeFeed:
    feed = getattr(connection.app.state, "change_feed", None)
    if feed is None:
        feed = ChangeFeed()
        connection.app.state.change_feed = feed
    return feed


def get_identity(connection: HTTPConnection) -> Identity:
    token = connection.headers.get(AUTH_HEADER)
    try:
        if token:
            return IdentityProvider().sign_in(token)
        identity = getattr(connection.app.state, "default_identity", None)
        if identity is None:
            identity = IdentityProvider().sign_in()
            connection.app.state.default_identity = identity
        return identity
    except AuthenticationError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.user_message) from exc


def get_repository(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
    identity: Identity = Depends(get_identity),
    feed: ChangeFeed = Depends(get_change_feed),
) -> AssessmentRepository:
    return AssessmentRepository(session_factory, identity, feed=feed)
