from setuptools import find_namespace_packages, setup

setup(
    name="todo-api",
    version="0.1.0",
    license="Apache License 2.0",

    python_requires=">=3.11",
    description="REST API for managing users and their todo tasks, with JWT "
                "authentication, filtering, sorting and pagination.",

    packages=find_namespace_packages(include=("todo_api", "todo_api.*")),

    install_requires=[
        "fastapi>=0.115.0,<0.137",
        "pydantic>=2.7,<3.0",
        "pydantic-settings[yaml]>=2.3,<3.0",
        "email-validator>=2.1,<3.0",
        "python-jose[cryptography]>=3.3,<4.0",
        "bcrypt>=4.1,<6.0",
        "SQLAlchemy>=2.0.30,<2.1",
        "psycopg2-binary>=2.9,<3.0",
        "python-json-logger>=3.1,<4.0",
        "prometheus-fastapi-instrumentator>=7.0,<8.0",
        "redis>=5.0,<7.0",
        "cachetools>=5.3,<7.0",
        "uvicorn[standard]>=0.30,<1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "httpx>=0.27",
        ],
    },

    test_suite="tests",

    classifiers=[
        'Development Status :: 3 - Alpha',
        'Framework :: FastAPI',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.12',
    ],
    entry_points={
        'console_scripts': [
            'todo-api = todo_api.scripts.serve:main',
            'todo-api-generate-token = todo_api.scripts.generate_token:main',
        ],
    },
)
