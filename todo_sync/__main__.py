from .cli import main

if __name__ == "__main__":  # pragma: no cover - manual execution
    raise SystemExit(main())
