from solar_loop.cli import main

raise SystemExit(main())
