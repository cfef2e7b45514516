from dating_service.main import main

main()
