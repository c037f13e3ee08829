from oss_attribution.cli import main

main()
