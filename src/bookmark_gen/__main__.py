from bookmark_gen.cli import main

raise SystemExit(main())
