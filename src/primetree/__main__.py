from primetree.cli import main

raise SystemExit(main())
