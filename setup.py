from setuptools import setup, find_packages

with open("Readme.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()
    
setup(
    name="migration-auditor",
    version="1.0.0",
    author="Migration Auditor Team",
    description='Auditeur de poste macOS : inventaire avant migration, archive et rapports.',
    long_description=long_description,
    long_description_content_type='text/markdown',
    include_package_data=True,
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "auditor.reporting": ["templates/*.html"],
        "auditor.web": ["templates/*.html"],
    },
    python_requires='>=3.8',
    install_requires=[
        "psutil>=5.9.0",
        "Flask>=2.3.0",
        "Jinja2>=3.1.0",
        "schedule>=1.2.0",
        "configparser>=5.3.0",
        "reportlab>=4.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },

    entry_points='''
        [console_scripts]
        migration-auditor=auditor.main:main
    '''
)
