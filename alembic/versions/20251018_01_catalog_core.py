"""
Catalog core tables.

- users (role enum), movies, movie_files (video_quality enum), reviews.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic.
revision = "20251018_01_catalog_core"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # --- Enum types ---
    user_role = sa.Enum("user", "admin", "superadmin", name="user_role")
    video_quality = sa.Enum("P240", "P360", "P480", "P720", "P1080", "P4K", name="video_quality")

    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("username", sa.String(length=64), nullable=True),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("role", user_role, nullable=False, server_default=sa.text("'user'")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("username", name="uq_users_username"),
        sa.CheckConstraint("length(btrim(email)) > 0", name="ck_users_email_not_blank"),
    )
    op.create_index("uq_users_email_lower", "users", [sa.text("lower(email)")], unique=True)
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    # --- movies ---
    op.create_table(
        "movies",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("release_year", sa.Integer(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("subscription_type", sa.String(length=32), nullable=False, server_default=sa.text("'free'")),
        sa.Column("poster_url", sa.String(length=1024), nullable=True),
        sa.Column("rating", sa.Numeric(3, 1), nullable=False, server_default=sa.text("0")),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_movies"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], name="fk_movies_created_by_users", ondelete="SET NULL"),
        sa.UniqueConstraint("slug", name="uq_movies_slug"),
        sa.CheckConstraint("length(btrim(title)) > 0", name="ck_movies_title_not_blank"),
        sa.CheckConstraint("length(btrim(subscription_type)) > 0", name="ck_movies_subscription_type_not_blank"),
        sa.CheckConstraint("duration_minutes >= 0", name="ck_movies_duration_nonneg"),
        sa.CheckConstraint("view_count >= 0", name="ck_movies_view_count_nonneg"),
        sa.CheckConstraint("rating >= 0 AND rating <= 10", name="ck_movies_rating_range"),
    )
    op.create_index("ix_movies_created_by", "movies", ["created_by"], unique=False)
    op.create_index("ix_movies_created_at", "movies", ["created_at"], unique=False)

    # --- movie_files ---
    op.create_table(
        "movie_files",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("movie_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("quality", video_quality, nullable=False),
        sa.Column("language", sa.String(length=16), nullable=False),
        sa.Column("file_url", sa.String(length=1024), nullable=False),
        sa.Column("size_mb", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_movie_files"),
        sa.ForeignKeyConstraint(["movie_id"], ["movies.id"], name="fk_movie_files_movie_id_movies", ondelete="CASCADE"),
        sa.CheckConstraint("length(btrim(file_url)) > 0", name="ck_movie_files_file_url_not_blank"),
        sa.CheckConstraint("length(btrim(language)) > 0", name="ck_movie_files_language_not_blank"),
        sa.CheckConstraint("(size_mb IS NULL) OR (size_mb >= 0)", name="ck_movie_files_size_nonneg"),
    )
    op.create_index("ix_movie_files_movie_id", "movie_files", ["movie_id"], unique=False)
    op.create_index("ix_movie_files_movie_quality", "movie_files", ["movie_id", "quality"], unique=False)

    # --- reviews ---
    op.create_table(
        "reviews",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("movie_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("rating", sa.SmallInteger(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_reviews"),
        sa.ForeignKeyConstraint(["movie_id"], ["movies.id"], name="fk_reviews_movie_id_movies", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name="fk_reviews_user_id_users", ondelete="CASCADE"),
        sa.UniqueConstraint("user_id", "movie_id", name="uq_reviews_user_movie"),
        sa.CheckConstraint("rating BETWEEN 1 AND 10", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_movie_id", "reviews", ["movie_id"], unique=False)
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_reviews_user_id", table_name="reviews")
    op.drop_index("ix_reviews_movie_id", table_name="reviews")
    op.drop_table("reviews")

    op.drop_index("ix_movie_files_movie_quality", table_name="movie_files")
    op.drop_index("ix_movie_files_movie_id", table_name="movie_files")
    op.drop_table("movie_files")

    op.drop_index("ix_movies_created_at", table_name="movies")
    op.drop_index("ix_movies_created_by", table_name="movies")
    op.drop_table("movies")

    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("uq_users_email_lower", table_name="users")
    op.drop_table("users")

    sa.Enum(name="video_quality").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="user_role").drop(op.get_bind(), checkfirst=True)
