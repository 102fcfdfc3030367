from secure_labs.web.server import main

if __name__ == "__main__":
    main()
