"""Initial schema: reference data, users, housing records, documents, backlogs, audit log.

Revision ID: 0001
Revises:     (none)
Create Date: 2026-10-18
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op


def upgrade() -> None:
    # ---------------------------------------------------------------------- #
    # Enumerations are VARCHAR + CHECK so values can be added without        #
    # changing column types.                                                 #
    # ---------------------------------------------------------------------- #

    # ------------------------------------------------------------------ #
    # districts                                                            #
    # ------------------------------------------------------------------ #
    op.execute("""
        CREATE TABLE districts (
            id         SERIAL       NOT NULL,
            name       VARCHAR(200) NOT NULL,
            code       VARCHAR(20)  NOT NULL,
            created_at TIMESTAMP    NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMP    NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_districts PRIMARY KEY (id),
            CONSTRAINT uq_districts_code UNIQUE (code)
        )
    """)

    # ------------------------------------------------------------------ #
    # villages                                                             #
    # ------------------------------------------------------------------ #
    op.execute("""
        CREATE TABLE villages (
            id          SERIAL       NOT NULL,
            name        VARCHAR(200) NOT NULL,
            code        VARCHAR(20)  NOT NULL,
            district_id INTEGER      NOT NULL,
            created_at  TIMESTAMP    NOT NULL DEFAULT NOW(),
            updated_at  TIMESTAMP    NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_villages PRIMARY KEY (id),
            CONSTRAINT uq_villages_code_district UNIQUE (code, district_id),
            CONSTRAINT fk_villages_district FOREIGN KEY (district_id) REFERENCES districts (id)
        )
    """)

    # ------------------------------------------------------------------ #
    # users                                                                #
    # ------------------------------------------------------------------ #
    op.execute("""
        CREATE TABLE users (
            id            SERIAL       NOT NULL,
            username      VARCHAR(100) NOT NULL,
            email         VARCHAR(200) NOT NULL,
            password_hash VARCHAR(300) NOT NULL,   -- <salt hex>:<pbkdf2 hex>
            role          VARCHAR(20)  NOT NULL,
            district_id   INTEGER,
            village_id    INTEGER,
            is_active     BOOLEAN      NOT NULL DEFAULT TRUE,
            created_at    TIMESTAMP    NOT NULL DEFAULT NOW(),
            updated_at    TIMESTAMP    NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_users PRIMARY KEY (id),
            CONSTRAINT uq_users_username UNIQUE (username),
            CONSTRAINT uq_users_email UNIQUE (email),
            CONSTRAINT chk_users_role CHECK (
                role IN ('PUPR_ADMIN', 'KOMINFO_ADMIN', 'DISTRICT_OPERATOR',
                         'VILLAGE_OPERATOR', 'PUBLIC')
            ),
            CONSTRAINT fk_users_district FOREIGN KEY (district_id) REFERENCES districts (id),
            CONSTRAINT fk_users_village FOREIGN KEY (village_id) REFERENCES villages (id)
        )
    """)

    # ------------------------------------------------------------------ #
    # housing_records                                                      #
    # ------------------------------------------------------------------ #
    op.execute("""
        CREATE TABLE housing_records (
            id                    SERIAL         NOT NULL,
            head_of_household     VARCHAR(200)   NOT NULL,
            nik                   VARCHAR(16)    NOT NULL,
            housing_status        VARCHAR(10)    NOT NULL,
            eligibility_category  VARCHAR(20)    NOT NULL,
            verification_status   VARCHAR(20)    NOT NULL DEFAULT 'PENDING',
            district_id           INTEGER        NOT NULL,
            village_id            INTEGER        NOT NULL,
            latitude              DECIMAL(10, 8),
            longitude             DECIMAL(11, 8),
            address               TEXT           NOT NULL,
            phone                 VARCHAR(50),
            family_members        INTEGER        NOT NULL,
            monthly_income        DECIMAL(12, 2),
            house_condition_score INTEGER,
            notes                 TEXT,
            verified_by           INTEGER,
            verified_at           TIMESTAMP,
            created_by            INTEGER        NOT NULL,
            created_at            TIMESTAMP      NOT NULL DEFAULT NOW(),
            updated_at            TIMESTAMP      NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_housing_records PRIMARY KEY (id),
            CONSTRAINT uq_housing_records_nik UNIQUE (nik),
            CONSTRAINT chk_housing_status CHECK (housing_status IN ('RTLH', 'RLH')),
            CONSTRAINT chk_housing_eligibility CHECK (
                eligibility_category IN ('POOR', 'VERY_POOR', 'MODERATE', 'NOT_ELIGIBLE')
            ),
            CONSTRAINT chk_housing_verification CHECK (
                verification_status IN ('PENDING', 'VERIFIED', 'REJECTED')
            ),
            CONSTRAINT chk_housing_family_members CHECK (family_members > 0),
            CONSTRAINT chk_housing_condition_score CHECK (
                house_condition_score IS NULL OR house_condition_score BETWEEN 0 AND 100
            ),
            CONSTRAINT fk_housing_district FOREIGN KEY (district_id) REFERENCES districts (id),
            CONSTRAINT fk_housing_village FOREIGN KEY (village_id) REFERENCES villages (id),
            CONSTRAINT fk_housing_verified_by FOREIGN KEY (verified_by) REFERENCES users (id),
            CONSTRAINT fk_housing_created_by FOREIGN KEY (created_by) REFERENCES users (id)
        )
    """)

    # ------------------------------------------------------------------ #
    # documents                                                            #
    # ------------------------------------------------------------------ #
    op.execute("""
        CREATE TABLE documents (
            id                SERIAL       NOT NULL,
            housing_record_id INTEGER      NOT NULL,
            document_type     VARCHAR(30)  NOT NULL,
            filename          VARCHAR(255) NOT NULL,
            file_path         VARCHAR(500) NOT NULL,   -- blob key or URL
            file_size         INTEGER      NOT NULL,
            mime_type         VARCHAR(100) NOT NULL,
            uploaded_by       INTEGER      NOT NULL,
            created_at        TIMESTAMP    NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_documents PRIMARY KEY (id),
            CONSTRAINT chk_documents_type CHECK (
                document_type IN ('LAND_CERTIFICATE', 'ID_CARD', 'FAMILY_CARD',
                                  'HOUSE_PHOTO_BEFORE', 'HOUSE_PHOTO_AFTER')
            ),
            CONSTRAINT fk_documents_housing_record FOREIGN KEY (housing_record_id)
                REFERENCES housing_records (id) ON DELETE CASCADE,
            CONSTRAINT fk_documents_uploaded_by FOREIGN KEY (uploaded_by) REFERENCES users (id)
        )
    """)

    # ------------------------------------------------------------------ #
    # backlogs                                                             #
    # ------------------------------------------------------------------ #
    op.execute("""
        CREATE TABLE backlogs (
            id           SERIAL      NOT NULL,
            district_id  INTEGER     NOT NULL,
            village_id   INTEGER     NOT NULL,
            backlog_type VARCHAR(30) NOT NULL,
            family_count INTEGER     NOT NULL,
            year         SMALLINT    NOT NULL,
            month        SMALLINT    NOT NULL,
            created_by   INTEGER     NOT NULL,
            created_at   TIMESTAMP   NOT NULL DEFAULT NOW(),
            updated_at   TIMESTAMP   NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_backlogs PRIMARY KEY (id),
            CONSTRAINT uq_backlogs_entry UNIQUE (district_id, village_id, backlog_type, year, month),
            CONSTRAINT chk_backlogs_type CHECK (backlog_type IN ('NO_HOUSE', 'UNINHABITABLE_HOUSE')),
            CONSTRAINT chk_backlogs_family_count CHECK (family_count >= 0),
            CONSTRAINT chk_backlogs_month CHECK (month BETWEEN 1 AND 12),
            CONSTRAINT fk_backlogs_district FOREIGN KEY (district_id) REFERENCES districts (id),
            CONSTRAINT fk_backlogs_village FOREIGN KEY (village_id) REFERENCES villages (id),
            CONSTRAINT fk_backlogs_created_by FOREIGN KEY (created_by) REFERENCES users (id)
        )
    """)

    # ------------------------------------------------------------------ #
    # audit_logs: append-only, user_id is not a foreign key             #
    # ------------------------------------------------------------------ #
    op.execute("""
        CREATE TABLE audit_logs (
            id            SERIAL      NOT NULL,
            user_id       INTEGER     NOT NULL,
            action        VARCHAR(10) NOT NULL,
            resource_type VARCHAR(50) NOT NULL,
            resource_id   INTEGER,
            details       TEXT,
            ip_address    VARCHAR(45),
            created_at    TIMESTAMP   NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_audit_logs PRIMARY KEY (id),
            CONSTRAINT chk_audit_logs_action CHECK (
                action IN ('CREATE', 'UPDATE', 'DELETE', 'VERIFY', 'LOGIN', 'EXPORT')
            )
        )
    """)

    # ------------------------------------------------------------------ #
    # Indexes                                                              #
    # ------------------------------------------------------------------ #
    op.execute("CREATE INDEX idx_districts_name ON districts (name)")
    op.execute("CREATE INDEX idx_villages_name ON villages (name)")
    op.execute("CREATE INDEX idx_villages_district ON villages (district_id)")
    op.execute("CREATE INDEX idx_users_role ON users (role)")
    op.execute("CREATE INDEX idx_housing_status ON housing_records (housing_status)")
    op.execute("CREATE INDEX idx_housing_verification ON housing_records (verification_status)")
    op.execute("CREATE INDEX idx_housing_district ON housing_records (district_id)")
    op.execute("CREATE INDEX idx_housing_village ON housing_records (village_id)")
    op.execute("CREATE INDEX idx_documents_housing_record ON documents (housing_record_id)")
    op.execute("CREATE INDEX idx_backlogs_district ON backlogs (district_id)")
    op.execute("CREATE INDEX idx_backlogs_village ON backlogs (village_id)")
    op.execute("CREATE INDEX idx_backlogs_year_month ON backlogs (year, month)")
    op.execute("CREATE INDEX idx_audit_logs_user ON audit_logs (user_id)")
    op.execute("CREATE INDEX idx_audit_logs_action ON audit_logs (action)")
    op.execute("CREATE INDEX idx_audit_logs_resource ON audit_logs (resource_type, resource_id)")
    op.execute("CREATE INDEX idx_audit_logs_created_at ON audit_logs (created_at)")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS audit_logs CASCADE")
    op.execute("DROP TABLE IF EXISTS backlogs CASCADE")
    op.execute("DROP TABLE IF EXISTS documents CASCADE")
    op.execute("DROP TABLE IF EXISTS housing_records CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
    op.execute("DROP TABLE IF EXISTS villages CASCADE")
    op.execute("DROP TABLE IF EXISTS districts CASCADE")
