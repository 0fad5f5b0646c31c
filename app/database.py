# app/database.py
from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

# ---------------------------------------------------------
# The engine is built once per application in create_app()
# and kept on app.state. There is no module-level client:
# every request gets its own Session through get_session()
# and the Session is closed when the request finishes.
#
# - pool_pre_ping=True: validate connections before using them
# - check_same_thread=False (SQLite only): FastAPI runs sync
#   endpoints in a threadpool, so the connection may be used
#   from a different thread than the one that opened it.
# ---------------------------------------------------------


def build_engine(db_url: str, echo: bool = False) -> Engine:
    """
    Create the SQLAlchemy engine for the given database URL.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(
        db_url,
        echo=echo,  # set to True if you want to debug SQL queries
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def create_db_and_tables(engine: Engine) -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    # Import models so SQLModel metadata is populated before create_all()
    from app.models import user as _user_models  # noqa: F401
    from app.models import product as _product_models  # noqa: F401
    from app.models import cart as _cart_models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    """
    FastAPI dependency that yields a SQLModel Session bound to the
    application's engine.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...

    Creating the Session does not open a connection; one is checked out
    from the pool only when the first statement runs.
    """
    with Session(request.app.state.engine) as session:
        yield session
