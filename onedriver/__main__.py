from onedriver.cli import main

raise SystemExit(main())
