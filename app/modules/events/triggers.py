"""Row triggers that publish ticket and schedule changes with pg_notify.

The ticket payload leaves out qr_code so it stays under the 8000 byte NOTIFY limit.
"""

TRIGGER_DDL = [
    """
    CREATE OR REPLACE FUNCTION notify_ticket_update() RETURNS trigger AS $$
    DECLARE
        rec ticket;
    BEGIN
        IF TG_OP = 'DELETE' THEN rec := OLD; ELSE rec := NEW; END IF;
        PERFORM pg_notify(
            'ticket_update',
            json_build_object('action', lower(TG_OP), 'data', to_jsonb(rec) - 'qr_code')::text
        );
        RETURN rec;
    END;
    $$ LANGUAGE plpgsql
    """,
    "DROP TRIGGER IF EXISTS ticket_notify ON ticket",
    """
    CREATE TRIGGER ticket_notify AFTER INSERT OR UPDATE OR DELETE ON ticket
    FOR EACH ROW EXECUTE FUNCTION notify_ticket_update()
    """,
    """
    CREATE OR REPLACE FUNCTION notify_schedule_update() RETURNS trigger AS $$
    DECLARE
        rec schedule;
    BEGIN
        IF TG_OP = 'DELETE' THEN rec := OLD; ELSE rec := NEW; END IF;
        PERFORM pg_notify(
            'schedule_update',
            json_build_object('operation', lower(TG_OP), 'data', to_jsonb(rec))::text
        );
        RETURN rec;
    END;
    $$ LANGUAGE plpgsql
    """,
    "DROP TRIGGER IF EXISTS schedule_notify ON schedule",
    """
    CREATE TRIGGER schedule_notify AFTER INSERT OR UPDATE OR DELETE ON schedule
    FOR EACH ROW EXECUTE FUNCTION notify_schedule_update()
    """,
]
