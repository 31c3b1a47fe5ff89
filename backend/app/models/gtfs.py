"""GTFS (General Transit Feed Specification) models"""

from decimal import Decimal
from sqlalchemy import (
    String,
    Integer,
    ForeignKey,
    ForeignKeyConstraint,
    UniqueConstraint,
    CheckConstraint,
    Text,
    Numeric,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base_class import Base, TimestampMixin


class Agency(Base, TimestampMixin):
    """GTFS agency.txt - Transit agencies operating in a project"""

    __tablename__ = "gtfs_agencies"
    __table_args__ = (
        {"comment": "GTFS agencies - uses composite PK (project_id, agency_id)"}
    )

    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True, nullable=False
    )
    agency_id: Mapped[str] = mapped_column(String(255), primary_key=True, nullable=False)

    agency_name: Mapped[str] = mapped_column(String(255), nullable=False)
    agency_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    agency_timezone: Mapped[str | None] = mapped_column(
        String(100), nullable=True, comment="IANA timezone (e.g., America/New_York)"
    )

    project: Mapped["Project"] = relationship("Project", back_populates="agencies")

    def __repr__(self) -> str:
        return f"<Agency {self.agency_name}>"


class Stop(Base, TimestampMixin):
    """GTFS stops.txt - Transit stops/stations"""

    __tablename__ = "gtfs_stops"
    __table_args__ = (
        {"comment": "GTFS stops - uses composite PK (project_id, stop_id)"}
    )

    # Composite primary key: (project_id, stop_id)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True, nullable=False
    )
    stop_id: Mapped[str] = mapped_column(String(255), primary_key=True, nullable=False)

    # GTFS fields
    stop_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    stop_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    stop_desc: Mapped[str | None] = mapped_column(Text, nullable=True)
    stop_lat: Mapped[Decimal] = mapped_column(Numeric(10, 8), nullable=False)
    stop_lon: Mapped[Decimal] = mapped_column(Numeric(11, 8), nullable=False)
    location_type: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0, comment="0=stop, 1=station, 2=entrance, 3=node"
    )
    parent_station: Mapped[str | None] = mapped_column(String(255), nullable=True)

    project: Mapped["Project"] = relationship("Project", back_populates="stops")

    def __repr__(self) -> str:
        return f"<Stop {self.stop_name}>"


class Route(Base, TimestampMixin):
    """GTFS routes.txt - Transit routes"""

    __tablename__ = "gtfs_routes"
    __table_args__ = (
        {"comment": "GTFS routes - uses composite PK (project_id, route_id)"}
    )

    # Composite primary key: (project_id, route_id)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True, nullable=False
    )
    route_id: Mapped[str] = mapped_column(String(255), primary_key=True, nullable=False)

    agency_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)

    # GTFS fields
    route_short_name: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    route_long_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    route_type: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=3,
        comment="0=Tram, 1=Subway, 2=Rail, 3=Bus, 4=Ferry, 5=Cable car, 6=Gondola, 7=Funicular",
    )
    route_color: Mapped[str | None] = mapped_column(String(6), nullable=True)
    route_text_color: Mapped[str | None] = mapped_column(String(6), nullable=True)

    project: Mapped["Project"] = relationship("Project", back_populates="routes")

    def __repr__(self) -> str:
        return f"<Route {self.route_short_name} - {self.route_long_name}>"


class Trip(Base, TimestampMixin):
    """GTFS trips.txt - Individual trips"""

    __tablename__ = "gtfs_trips"
    __table_args__ = (
        ForeignKeyConstraint(
            ['project_id', 'route_id'],
            ['gtfs_routes.project_id', 'gtfs_routes.route_id'],
            ondelete="CASCADE"
        ),
        CheckConstraint("direction_id IN (0, 1)", name="ck_gtfs_trips_direction_id"),
        {"comment": "GTFS trips - uses composite PK (project_id, trip_id) and composite FKs"}
    )

    # Composite primary key: (project_id, trip_id)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True, nullable=False
    )
    trip_id: Mapped[str] = mapped_column(String(255), primary_key=True, nullable=False)

    route_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    service_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Optional reference to Shape (project_id, shape_id)
    # No FK constraint because shape has shape_pt_sequence in PK
    shape_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # GTFS fields
    trip_headsign: Mapped[str | None] = mapped_column(String(255), nullable=True)
    trip_short_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    direction_id: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0, comment="0=outbound, 1=inbound"
    )
    block_id: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Trip {self.trip_id}>"


class RouteStop(Base, TimestampMixin):
    """Route topology - ordered stops of a route in one direction, independent of any trip"""

    __tablename__ = "gtfs_route_stops"
    __table_args__ = (
        ForeignKeyConstraint(
            ['project_id', 'route_id'],
            ['gtfs_routes.project_id', 'gtfs_routes.route_id'],
            ondelete="CASCADE"
        ),
        ForeignKeyConstraint(
            ['project_id', 'stop_id'],
            ['gtfs_stops.project_id', 'gtfs_stops.stop_id'],
            ondelete="CASCADE"
        ),
        {"comment": "Route stops - uses composite PK (project_id, route_id, direction_id, stop_sequence)"}
    )

    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True, nullable=False
    )
    route_id: Mapped[str] = mapped_column(String(255), primary_key=True, nullable=False)
    direction_id: Mapped[int] = mapped_column(Integer, primary_key=True, nullable=False, default=0)
    stop_sequence: Mapped[int] = mapped_column(Integer, primary_key=True, nullable=False)

    stop_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<RouteStop route={self.route_id} dir={self.direction_id} seq={self.stop_sequence}>"


class StopTime(Base, TimestampMixin):
    """GTFS stop_times.txt - Stop times for trips"""

    __tablename__ = "gtfs_stop_times"
    __table_args__ = (
        ForeignKeyConstraint(
            ['project_id', 'trip_id'],
            ['gtfs_trips.project_id', 'gtfs_trips.trip_id'],
            ondelete="CASCADE"
        ),
        ForeignKeyConstraint(
            ['project_id', 'stop_id'],
            ['gtfs_stops.project_id', 'gtfs_stops.stop_id'],
            ondelete="CASCADE"
        ),
        {"comment": "GTFS stop_times - uses composite PK (project_id, trip_id, stop_sequence)"}
    )

    # Composite primary key: (project_id, trip_id, stop_sequence)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True, nullable=False
    )
    trip_id: Mapped[str] = mapped_column(String(255), primary_key=True, nullable=False)
    stop_sequence: Mapped[int] = mapped_column(Integer, primary_key=True, nullable=False)

    stop_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # GTFS fields
    arrival_time: Mapped[str] = mapped_column(
        String(8), nullable=False, comment="Format: HH:MM:SS"
    )
    departure_time: Mapped[str] = mapped_column(
        String(8), nullable=False, comment="Format: HH:MM:SS"
    )
    stop_headsign: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pickup_type: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0, comment="0=regular, 1=none, 2=phone, 3=driver"
    )
    drop_off_type: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=0, comment="0=regular, 1=none, 2=phone, 3=driver"
    )
    shape_dist_traveled: Mapped[Decimal | None] = mapped_column(
        Numeric(16, 10), nullable=True, comment="Distance traveled along shape in meters"
    )
    timepoint: Mapped[int | None] = mapped_column(
        Integer, nullable=True, default=1, comment="0=approximate, 1=exact"
    )

    def __repr__(self) -> str:
        return f"<StopTime trip={self.trip_id} stop={self.stop_id} seq={self.stop_sequence}>"


class Shape(Base, TimestampMixin):
    """GTFS shapes.txt - Route shapes/paths"""

    __tablename__ = "gtfs_shapes"
    __table_args__ = (
        {"comment": "GTFS shapes - uses composite PK (project_id, shape_id, shape_pt_sequence)"}
    )

    # Each shape has multiple points, so we need sequence in PK
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True, nullable=False
    )
    shape_id: Mapped[str] = mapped_column(String(255), primary_key=True, nullable=False)
    shape_pt_sequence: Mapped[int] = mapped_column(Integer, primary_key=True, nullable=False)

    # GTFS fields
    shape_pt_lat: Mapped[Decimal] = mapped_column(Numeric(10, 8), nullable=False)
    shape_pt_lon: Mapped[Decimal] = mapped_column(Numeric(11, 8), nullable=False)
    shape_dist_traveled: Mapped[Decimal | None] = mapped_column(
        Numeric(16, 10), nullable=True, comment="Distance traveled along shape in meters"
    )

    def __repr__(self) -> str:
        return f"<Shape {self.shape_id} pt={self.shape_pt_sequence}>"


class Frequency(Base, TimestampMixin):
    """GTFS frequencies.txt - Headway-based service windows for a trip"""

    __tablename__ = "gtfs_frequencies"
    __table_args__ = (
        ForeignKeyConstraint(
            ['project_id', 'trip_id'],
            ['gtfs_trips.project_id', 'gtfs_trips.trip_id'],
            ondelete="CASCADE"
        ),
        CheckConstraint("headway_secs > 0", name="ck_gtfs_frequencies_headway_positive"),
        {"comment": "GTFS frequencies - surrogate PK, windows of one trip never overlap"}
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    trip_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    start_time: Mapped[str] = mapped_column(String(8), nullable=False, comment="Format: HH:MM:SS")
    end_time: Mapped[str] = mapped_column(String(8), nullable=False, comment="Format: HH:MM:SS")
    headway_secs: Mapped[int] = mapped_column(Integer, nullable=False)
    exact_times: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, comment="0=frequency-based, 1=schedule-based"
    )

    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Frequency trip={self.trip_id} {self.start_time}-{self.end_time}>"


class Transfer(Base, TimestampMixin):
    """GTFS transfers.txt - Directional transfer rules between stops"""

    __tablename__ = "gtfs_transfers"
    __table_args__ = (
        ForeignKeyConstraint(
            ['project_id', 'from_stop_id'],
            ['gtfs_stops.project_id', 'gtfs_stops.stop_id'],
            ondelete="CASCADE"
        ),
        ForeignKeyConstraint(
            ['project_id', 'to_stop_id'],
            ['gtfs_stops.project_id', 'gtfs_stops.stop_id'],
            ondelete="CASCADE"
        ),
        UniqueConstraint(
            "project_id", "from_stop_id", "to_stop_id", name="uq_gtfs_transfers_project_from_to"
        ),
        CheckConstraint("transfer_type BETWEEN 0 AND 3", name="ck_gtfs_transfers_type"),
        {"comment": "GTFS transfers - surrogate PK, unique per (project_id, from_stop_id, to_stop_id)"}
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    project_id: Mapped[int] = mapped_column(
        ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_stop_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    to_stop_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    transfer_type: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="0=recommended, 1=timed, 2=minimum time required, 3=not possible",
    )
    min_transfer_time: Mapped[int | None] = mapped_column(
        Integer, nullable=True, comment="Seconds needed to transfer"
    )

    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Transfer {self.from_stop_id} -> {self.to_stop_id}>"
