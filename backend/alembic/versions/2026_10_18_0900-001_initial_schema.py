"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    # Projects table (tenant boundary)
    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_projects_id', 'projects', ['id'])

    # GTFS Agencies table
    op.create_table(
        'gtfs_agencies',
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('agency_id', sa.String(length=255), nullable=False),
        sa.Column('agency_name', sa.String(length=255), nullable=False),
        sa.Column('agency_url', sa.String(length=500), nullable=True),
        sa.Column('agency_timezone', sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('project_id', 'agency_id')
    )

    # GTFS Stops table
    op.create_table(
        'gtfs_stops',
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('stop_id', sa.String(length=255), nullable=False),
        sa.Column('stop_code', sa.String(length=50), nullable=True),
        sa.Column('stop_name', sa.String(length=255), nullable=False),
        sa.Column('stop_desc', sa.Text(), nullable=True),
        sa.Column('stop_lat', sa.Numeric(precision=10, scale=8), nullable=False),
        sa.Column('stop_lon', sa.Numeric(precision=11, scale=8), nullable=False),
        sa.Column('location_type', sa.Integer(), nullable=True, server_default='0'),
        sa.Column('parent_station', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('project_id', 'stop_id')
    )
    op.create_index('ix_gtfs_stops_stop_name', 'gtfs_stops', ['stop_name'])

    # GTFS Routes table
    op.create_table(
        'gtfs_routes',
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('route_id', sa.String(length=255), nullable=False),
        sa.Column('agency_id', sa.String(length=255), nullable=True),
        sa.Column('route_short_name', sa.String(length=50), nullable=True),
        sa.Column('route_long_name', sa.String(length=255), nullable=True),
        sa.Column('route_type', sa.Integer(), nullable=False, server_default='3'),
        sa.Column('route_color', sa.String(length=6), nullable=True),
        sa.Column('route_text_color', sa.String(length=6), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('project_id', 'route_id')
    )
    op.create_index('ix_gtfs_routes_agency_id', 'gtfs_routes', ['agency_id'])
    op.create_index('ix_gtfs_routes_route_short_name', 'gtfs_routes', ['route_short_name'])

    # GTFS Trips table
    op.create_table(
        'gtfs_trips',
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('trip_id', sa.String(length=255), nullable=False),
        sa.Column('route_id', sa.String(length=255), nullable=False),
        sa.Column('service_id', sa.String(length=255), nullable=False),
        sa.Column('shape_id', sa.String(length=255), nullable=True),
        sa.Column('trip_headsign', sa.String(length=255), nullable=True),
        sa.Column('trip_short_name', sa.String(length=50), nullable=True),
        sa.Column('direction_id', sa.Integer(), nullable=True, server_default='0'),
        sa.Column('block_id', sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['project_id', 'route_id'],
            ['gtfs_routes.project_id', 'gtfs_routes.route_id'],
            ondelete='CASCADE'
        ),
        sa.CheckConstraint('direction_id IN (0, 1)', name='ck_gtfs_trips_direction_id'),
        sa.PrimaryKeyConstraint('project_id', 'trip_id')
    )
    op.create_index('ix_gtfs_trips_route_id', 'gtfs_trips', ['route_id'])
    op.create_index('ix_gtfs_trips_service_id', 'gtfs_trips', ['service_id'])

    # Route topology table
    op.create_table(
        'gtfs_route_stops',
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('route_id', sa.String(length=255), nullable=False),
        sa.Column('direction_id', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('stop_sequence', sa.Integer(), nullable=False),
        sa.Column('stop_id', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['project_id', 'route_id'],
            ['gtfs_routes.project_id', 'gtfs_routes.route_id'],
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['project_id', 'stop_id'],
            ['gtfs_stops.project_id', 'gtfs_stops.stop_id'],
            ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('project_id', 'route_id', 'direction_id', 'stop_sequence')
    )
    op.create_index('ix_gtfs_route_stops_stop_id', 'gtfs_route_stops', ['stop_id'])

    # GTFS Stop Times table
    op.create_table(
        'gtfs_stop_times',
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('trip_id', sa.String(length=255), nullable=False),
        sa.Column('stop_sequence', sa.Integer(), nullable=False),
        sa.Column('stop_id', sa.String(length=255), nullable=False),
        sa.Column('arrival_time', sa.String(length=8), nullable=False),
        sa.Column('departure_time', sa.String(length=8), nullable=False),
        sa.Column('stop_headsign', sa.String(length=255), nullable=True),
        sa.Column('pickup_type', sa.Integer(), nullable=True, server_default='0'),
        sa.Column('drop_off_type', sa.Integer(), nullable=True, server_default='0'),
        sa.Column('shape_dist_traveled', sa.Numeric(precision=16, scale=10), nullable=True),
        sa.Column('timepoint', sa.Integer(), nullable=True, server_default='1'),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['project_id', 'trip_id'],
            ['gtfs_trips.project_id', 'gtfs_trips.trip_id'],
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['project_id', 'stop_id'],
            ['gtfs_stops.project_id', 'gtfs_stops.stop_id'],
            ondelete='CASCADE'
        ),
        sa.PrimaryKeyConstraint('project_id', 'trip_id', 'stop_sequence')
    )
    op.create_index('ix_gtfs_stop_times_stop_id', 'gtfs_stop_times', ['stop_id'])

    # GTFS Shapes table
    op.create_table(
        'gtfs_shapes',
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('shape_id', sa.String(length=255), nullable=False),
        sa.Column('shape_pt_sequence', sa.Integer(), nullable=False),
        sa.Column('shape_pt_lat', sa.Numeric(precision=10, scale=8), nullable=False),
        sa.Column('shape_pt_lon', sa.Numeric(precision=11, scale=8), nullable=False),
        sa.Column('shape_dist_traveled', sa.Numeric(precision=16, scale=10), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('project_id', 'shape_id', 'shape_pt_sequence')
    )

    # GTFS Frequencies table
    op.create_table(
        'gtfs_frequencies',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('trip_id', sa.String(length=255), nullable=False),
        sa.Column('start_time', sa.String(length=8), nullable=False),
        sa.Column('end_time', sa.String(length=8), nullable=False),
        sa.Column('headway_secs', sa.Integer(), nullable=False),
        sa.Column('exact_times', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['project_id', 'trip_id'],
            ['gtfs_trips.project_id', 'gtfs_trips.trip_id'],
            ondelete='CASCADE'
        ),
        sa.CheckConstraint('headway_secs > 0', name='ck_gtfs_frequencies_headway_positive'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_gtfs_frequencies_id', 'gtfs_frequencies', ['id'])
    op.create_index('ix_gtfs_frequencies_project_id', 'gtfs_frequencies', ['project_id'])
    op.create_index('ix_gtfs_frequencies_trip_id', 'gtfs_frequencies', ['trip_id'])

    # GTFS Transfers table
    op.create_table(
        'gtfs_transfers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('from_stop_id', sa.String(length=255), nullable=False),
        sa.Column('to_stop_id', sa.String(length=255), nullable=False),
        sa.Column('transfer_type', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('min_transfer_time', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(
            ['project_id', 'from_stop_id'],
            ['gtfs_stops.project_id', 'gtfs_stops.stop_id'],
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['project_id', 'to_stop_id'],
            ['gtfs_stops.project_id', 'gtfs_stops.stop_id'],
            ondelete='CASCADE'
        ),
        sa.UniqueConstraint('project_id', 'from_stop_id', 'to_stop_id', name='uq_gtfs_transfers_project_from_to'),
        sa.CheckConstraint('transfer_type BETWEEN 0 AND 3', name='ck_gtfs_transfers_type'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_gtfs_transfers_id', 'gtfs_transfers', ['id'])
    op.create_index('ix_gtfs_transfers_project_id', 'gtfs_transfers', ['project_id'])
    op.create_index('ix_gtfs_transfers_from_stop_id', 'gtfs_transfers', ['from_stop_id'])
    op.create_index('ix_gtfs_transfers_to_stop_id', 'gtfs_transfers', ['to_stop_id'])

    # Audit log table
    auditaction = sa.Enum('create', 'update', 'delete', 'replace', 'generate', name='auditaction')
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=True),
        sa.Column('actor_id', sa.Integer(), nullable=True),
        sa.Column('action', auditaction, nullable=False),
        sa.Column('entity_type', sa.String(length=100), nullable=False),
        sa.Column('entity_id', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_logs_id', 'audit_logs', ['id'])
    op.create_index('ix_audit_logs_project_id', 'audit_logs', ['project_id'])
    op.create_index('ix_audit_logs_actor_id', 'audit_logs', ['actor_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_entity_type', 'audit_logs', ['entity_type'])
    op.create_index('ix_audit_logs_entity_id', 'audit_logs', ['entity_id'])


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_table('audit_logs')
    op.drop_table('gtfs_transfers')
    op.drop_table('gtfs_frequencies')
    op.drop_table('gtfs_shapes')
    op.drop_table('gtfs_stop_times')
    op.drop_table('gtfs_route_stops')
    op.drop_table('gtfs_trips')
    op.drop_table('gtfs_routes')
    op.drop_table('gtfs_stops')
    op.drop_table('gtfs_agencies')
    op.drop_table('projects')

    # Drop ENUM types
    op.execute('DROP TYPE IF EXISTS auditaction')
