"""initial certivo schema

Revision ID: 3b9d2f7a1c04
Revises:
Create Date: 2026-10-18 10:12:41.204113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = '3b9d2f7a1c04'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


user_role = sa.Enum('ADMIN', 'USER', name='userrole')
certificate_status = sa.Enum('PENDING', 'VERIFIED', 'REJECTED', name='certificatestatus')
organization_type = sa.Enum('COLLEGE', 'COMPANY', 'TPO', 'OTHER', name='organizationtype')
activity_type = sa.Enum('ISSUED', 'IMPORTED', 'LOOKUP', name='activitytype')


def upgrade():
    op.create_table(
        'user',
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('hashed_password', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('google_id', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    op.create_table(
        'organization',
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('type', organization_type, nullable=False),
        sa.Column('contact_email', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('contact_person', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_organization_name'), 'organization', ['name'], unique=False)

    op.create_table(
        'certificate',
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('issued_by_admin_id', sa.Integer(), nullable=True),
        sa.Column('holder_name', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('program', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('organization_name', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('duration_text', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('status', certificate_status, nullable=False),
        sa.Column('issued_at', sa.DateTime(), nullable=False),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.ForeignKeyConstraint(['issued_by_admin_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_certificate_code'), 'certificate', ['code'], unique=True)
    op.create_index(op.f('ix_certificate_user_id'), 'certificate', ['user_id'], unique=False)
    op.create_index(op.f('ix_certificate_organization_name'), 'certificate', ['organization_name'], unique=False)

    op.create_table(
        'certificateactivity',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('certificate_id', sa.Integer(), nullable=False),
        sa.Column('admin_id', sa.Integer(), nullable=True),
        sa.Column('activity_type', activity_type, nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['certificate_id'], ['certificate.id']),
        sa.ForeignKeyConstraint(['admin_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_certificateactivity_certificate_id'), 'certificateactivity', ['certificate_id'], unique=False)

    op.create_table(
        'adminsettings',
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('auto_verify_imports', sa.Boolean(), nullable=False),
        sa.Column('require_review_for_manual', sa.Boolean(), nullable=False),
        sa.Column('lock_status_after_download', sa.Boolean(), nullable=False),
        sa.Column('public_lookup_enabled', sa.Boolean(), nullable=False),
        sa.Column('show_org_name_on_public', sa.Boolean(), nullable=False),
        sa.Column('allow_public_pdf_download', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('adminsettings')
    op.drop_index(op.f('ix_certificateactivity_certificate_id'), table_name='certificateactivity')
    op.drop_table('certificateactivity')
    op.drop_index(op.f('ix_certificate_organization_name'), table_name='certificate')
    op.drop_index(op.f('ix_certificate_user_id'), table_name='certificate')
    op.drop_index(op.f('ix_certificate_code'), table_name='certificate')
    op.drop_table('certificate')
    op.drop_index(op.f('ix_organization_name'), table_name='organization')
    op.drop_table('organization')
    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_table('user')

    bind = op.get_bind()
    # Postgres keeps enum types after their tables are gone
    if bind.dialect.name == 'postgresql':
        for enum in (activity_type, organization_type, certificate_status, user_role):
            enum.drop(bind, checkfirst=True)
