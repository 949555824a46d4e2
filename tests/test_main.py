import pytest

from migrator.config import Settings
from migrator.main import main


def _args(db_path, migrations_dir, *extra):
    return ["--database-url", f"sqlite:///{db_path}", "--dir", str(migrations_dir), *extra]


def test_run_exits_zero_on_success(db_path, write_migration, migrations_dir, table_names):
    write_migration("0001_add_table.sql", "CREATE TABLE IF NOT EXISTS t (id INTEGER);")
    write_migration("0002_add_index.sql", "CREATE INDEX IF NOT EXISTS idx_t ON t(id);")
    assert main(_args(db_path, migrations_dir)) == 0
    assert main(_args(db_path, migrations_dir)) == 0
    assert table_names() == ["idx_t", "t"]


def test_run_exits_nonzero_on_fatal_error(db_path, write_migration, migrations_dir, table_names, caplog):
    write_migration("0001_a.sql", "CREATE TABLE a (id INTEGER);")
    write_migration("0002_b.sql", "CREATE TABL b (id INTEGER);")
    write_migration("0003_c.sql", "CREATE TABLE c (id INTEGER);")
    assert main(["run", *_args(db_path, migrations_dir)]) == 1
    assert table_names() == ["a"]
    assert "0002_b.sql" in caplog.text


def test_missing_directory_exits_nonzero(db_path, tmp_path):
    assert main(_args(db_path, tmp_path / "missing")) == 1


def test_skip_bootstrap_flag(db_path, write_migration, migrations_dir, table_names):
    write_migration("0000_initial.sql", "CREATE TABLE boot (id INTEGER);")
    write_migration("0001_a.sql", "CREATE TABLE a (id INTEGER);")
    assert main(_args(db_path, migrations_dir, "--skip-bootstrap")) == 0
    assert table_names() == ["a"]
    assert main(_args(db_path, migrations_dir)) == 0
    assert table_names() == ["a", "boot"]


def test_include_bootstrap_overrides_env(monkeypatch, db_path, write_migration, migrations_dir, table_names):
    monkeypatch.setenv("SKIP_BOOTSTRAP", "true")
    write_migration("0000_initial.sql", "CREATE TABLE boot (id INTEGER);")
    assert main(_args(db_path, migrations_dir, "--include-bootstrap"), cfg=Settings()) == 0
    assert table_names() == ["boot"]


def test_list_prints_plan_without_executing(db_path, write_migration, migrations_dir, capsys):
    write_migration("0010_c.sql", "CREATE TABLE c (id INTEGER);")
    write_migration("0001_a.sql", "CREATE TABLE a (id INTEGER);")
    write_migration("0000_initial.sql", "CREATE TABLE boot (id INTEGER);")
    assert main(["list", *_args(db_path, migrations_dir, "--skip-bootstrap")]) == 0
    out = capsys.readouterr().out.split()
    assert out == ["0001_a.sql", "0010_c.sql"]
    assert not db_path.exists()


def test_list_marks_recorded_files(db_path, write_migration, migrations_dir, capsys):
    write_migration("0001_a.sql", "CREATE TABLE a (id INTEGER);")
    write_migration("0002_b.sql", "CREATE TABLE b (id INTEGER);")
    assert main(_args(db_path, migrations_dir, "--ledger")) == 0
    write_migration("0003_c.sql", "CREATE TABLE c (id INTEGER);")
    capsys.readouterr()
    assert main(["list", *_args(db_path, migrations_dir, "--ledger")]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines == ["0001_a.sql  [recorded]", "0002_b.sql  [recorded]", "0003_c.sql"]


def test_tables_command(db_path, write_migration, migrations_dir, capsys):
    write_migration("0001_a.sql", "CREATE TABLE a (id INTEGER);")
    assert main(_args(db_path, migrations_dir)) == 0
    capsys.readouterr()
    assert main(["tables", *_args(db_path, migrations_dir)]) == 0
    assert capsys.readouterr().out.split() == ["a"]


def test_repo_migrations_apply_cleanly(db_path, repo_migrations, table_names):
    assert main(_args(db_path, repo_migrations)) == 0
    assert main(_args(db_path, repo_migrations)) == 0
    names = table_names()
    for t in ("users", "products", "sales", "ai_analyses"):
        assert t in names


def test_unreachable_database_exits_nonzero(tmp_path, write_migration, migrations_dir, caplog):
    write_migration("0001_a.sql", "CREATE TABLE a (id INTEGER);")
    url = f"sqlite:///{tmp_path / 'no' / 'such' / 'dir' / 'x.db'}"
    assert main(["--database-url", url, "--dir", str(migrations_dir)]) == 1
    assert "Migration failed" in caplog.text
    assert "unable to open database file" in caplog.text


def test_malformed_database_url_exits_nonzero(migrations_dir, caplog):
    assert main(["--database-url", "not a database url", "--dir", str(migrations_dir)]) == 1
    assert "Migration failed" in caplog.text


def test_list_with_ledger_does_not_create_the_table(db_path, write_migration, migrations_dir, table_names, capsys):
    write_migration("0001_a.sql", "CREATE TABLE a (id INTEGER);")
    assert main(["list", *_args(db_path, migrations_dir, "--ledger")]) == 0
    assert capsys.readouterr().out.splitlines() == ["0001_a.sql"]
    assert "applied_migrations" not in table_names()


def test_invalid_log_level_flag_is_rejected(db_path, migrations_dir):
    with pytest.raises(SystemExit) as info:
        main(_args(db_path, migrations_dir, "--log-level", "LOUD"))
    assert info.value.code == 2
