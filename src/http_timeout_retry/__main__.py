from http_timeout_retry.cli import main

main()
