from careledger import create_app

app = create_app()
