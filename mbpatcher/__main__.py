from mbpatcher.main import main


raise SystemExit(main())
