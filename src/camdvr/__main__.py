from camdvr.cli import main

main()
