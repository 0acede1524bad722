"""
Source templates for the generated Express + Prisma backend.

Every function is pure and returns the text of one file. Text is assembled
as a list of lines joined with newlines.
"""
from typing import Dict, List, Optional
import json
import re

from apiforge.models import IdType, LogicalType, ID_PLACEHOLDER
from apiforge.services.api_service import handler_name

JAVASCRIPT = "javascript"
TYPESCRIPT = "typescript"

PRISMA_TYPES = {
    LogicalType.STRING.value: "String",
    LogicalType.NUMBER.value: "Int",
    LogicalType.BOOLEAN.value: "Boolean",
    LogicalType.DATE.value: "DateTime",
}

PRISMA_ID_FIELDS = {
    IdType.AUTO_INCREMENT.value: "Int @id @default(autoincrement())",
    IdType.UUID.value: "String @id @default(uuid())",
    IdType.CUID.value: "String @id @default(cuid())",
    IdType.MONGODB_ID.value: 'String @id @default(auto()) @map("_id") @db.ObjectId',
}

_HANDLER_ORDER = ["findAll", "findByID", "create", "updateByID", "deleteByID"]


def extension(language: str) -> str:
    return "ts" if language == TYPESCRIPT else "js"


def model_name(table_name: str) -> str:
    return table_name[:1].upper() + table_name[1:]


def client_accessor(table_name: str) -> str:
    """Prisma client property for a model (first letter lower-cased)."""
    name = model_name(table_name)
    return name[:1].lower() + name[1:]


def express_path(path: str) -> str:
    """``/todo/{id}`` -> ``/:id`` relative to the table's router."""
    segments = [segment for segment in path.split("/") if segment][1:]
    converted = "/".join(re.sub(r"{([^}]+)}", r":\1", segment) for segment in segments)
    return f"/{converted}" if converted else "/"


def _sorted_handlers(endpoints) -> List[str]:
    names = {handler_name(endpoint.method, endpoint.path) for endpoint in endpoints}
    return [name for name in _HANDLER_ORDER if name in names]


# server / routes

def server_file(language: str) -> str:
    if language == TYPESCRIPT:
        imports = [
            "import 'dotenv/config';",
            "import express from 'express';",
            "import cors from 'cors';",
            "import routes from './routes';",
            "import { errorHandler } from './middleware/errorHandler';",
        ]
        export = "export default app;"
    else:
        imports = [
            "require('dotenv').config();",
            "const express = require('express');",
            "const cors = require('cors');",
            "const routes = require('./routes');",
            "const { errorHandler } = require('./middleware/errorHandler');",
        ]
        export = "module.exports = app;"

    lines = imports + [
        "",
        "const app = express();",
        "",
        "app.use(express.json());",
        "app.use(express.urlencoded({ extended: true }));",
        "app.use(",
        "  cors({",
        "    origin: process.env.CLIENT_URL,",
        "    credentials: true,",
        "  })",
        ");",
        "",
        "app.use('/api', routes);",
        "",
        "// Error handling middleware",
        "app.use(errorHandler);",
        "",
        "const PORT = process.env.PORT || 3000;",
        "",
        "app.listen(PORT, () => {",
        "  console.log(`Server is running on http://localhost:${PORT}`);",
        "});",
        "",
        export,
        "",
    ]
    return "\n".join(lines)


def routes_file(table, language: str) -> str:
    prefix = table.name.lower()
    controller = f"{prefix}Controller"

    if language == TYPESCRIPT:
        lines = [
            "import express from 'express';",
            f"import * as {controller} from '../controllers/{controller}';",
        ]
        export = "export default router;"
    else:
        lines = [
            "const express = require('express');",
            f"const {controller} = require('../controllers/{controller}');",
        ]
        export = "module.exports = router;"

    lines += ["", "const router = express.Router();", ""]
    for endpoint in table.endpoints:
        verb = endpoint.method.lower()
        handler = handler_name(endpoint.method, endpoint.path)
        lines.append(f"router.{verb}('{express_path(endpoint.path)}', {controller}.{handler});")
    lines += ["", export, ""]
    return "\n".join(lines)


def routes_index_file(tables, language: str) -> str:
    if language == TYPESCRIPT:
        lines = ["import express from 'express';"]
        lines += [f"import {t.name.lower()}Routes from './{t.name.lower()}Routes';" for t in tables]
        export = "export default router;"
    else:
        lines = ["const express = require('express');"]
        lines += [f"const {t.name.lower()}Routes = require('./{t.name.lower()}Routes');" for t in tables]
        export = "module.exports = router;"

    lines += ["", "const router = express.Router();", ""]
    lines += [f"router.use('/{t.name.lower()}', {t.name.lower()}Routes);" for t in tables]
    lines += ["", export, ""]
    return "\n".join(lines)


# controllers

def _handler_body(handler: str, table) -> List[str]:
    accessor = client_accessor(table.name)
    not_found = f"throw new AppError('{model_name(table.name)} not found', 404);"
    id_expr = "parseInt(id, 10)" if table.id_type == IdType.AUTO_INCREMENT.value else "id"

    if handler == "findAll":
        return [
            f"const results = await prisma.{accessor}.findMany();",
            "res.status(200).json(results);",
        ]
    if handler == "findByID":
        return [
            "const { id } = req.params;",
            f"const result = await prisma.{accessor}.findUnique({{ where: {{ id: {id_expr} }} }});",
            "if (!result) {",
            f"  {not_found}",
            "}",
            "res.status(200).json(result);",
        ]
    if handler == "create":
        return [
            "const data = req.body;",
            f"const result = await prisma.{accessor}.create({{ data }});",
            "res.status(201).json(result);",
        ]
    if handler == "updateByID":
        return [
            "const { id } = req.params;",
            "const data = req.body;",
            f"const result = await prisma.{accessor}.update({{ where: {{ id: {id_expr} }}, data }});",
            "res.status(200).json(result);",
        ]
    return [
        "const { id } = req.params;",
        f"await prisma.{accessor}.delete({{ where: {{ id: {id_expr} }} }});",
        "res.status(204).send();",
    ]


def controller_file(table, language: str) -> str:
    handlers = _sorted_handlers(table.endpoints)
    typed = language == TYPESCRIPT

    if typed:
        lines = [
            "import { Request, Response, NextFunction } from 'express';",
            "import prisma from '../config/prisma';",
            "import { AppError } from '../middleware/errorHandler';",
        ]
        params = "req: Request, res: Response, next: NextFunction"
    else:
        lines = [
            "const prisma = require('../config/prisma');",
            "const { AppError } = require('../middleware/errorHandler');",
        ]
        params = "req, res, next"

    for handler in handlers:
        lines += ["", f"async function {handler}({params}) {{", "  try {"]
        lines += [f"    {line}" for line in _handler_body(handler, table)]
        lines += ["  } catch (error) {", "    next(error);", "  }", "}"]

    exported = ", ".join(handlers)
    lines += ["", f"export {{ {exported} }};" if typed else f"module.exports = {{ {exported} }};", ""]
    return "\n".join(lines)


def error_handler_file(language: str) -> str:
    typed = language == TYPESCRIPT
    t = (lambda annotation: annotation) if typed else (lambda annotation: "")

    lines = []
    if typed:
        lines += ["import { Request, Response, NextFunction } from 'express';", ""]

    lines += ["class AppError extends Error {"]
    if typed:
        lines += ["  statusCode: number;", "  status: string;", "  isOperational: boolean;", ""]
    lines += [
        f"  constructor(message{t(': string')}, statusCode{t(': number')}) {{",
        "    super(message);",
        "    this.statusCode = statusCode;",
        "    this.status = `${statusCode}`.startsWith('4') ? 'fail' : 'error';",
        "    this.isOperational = true;",
        "    Error.captureStackTrace(this, this.constructor);",
        "  }",
        "}",
        "",
        f"function errorResponse(err{t(': any')}) {{",
        "  return {",
        "    success: false,",
        "    error: {",
        "      message: err.message,",
        "      status: err.status,",
        "      statusCode: err.statusCode,",
        "      ...(process.env.NODE_ENV === 'development' && { stack: err.stack }),",
        "    },",
        "  };",
        "}",
        "",
        f"const errorHandler = (err{t(': any')}, req{t(': Request')}, res{t(': Response')}, "
        f"next{t(': NextFunction')}) => {{",
        "  // Prisma: record to update or delete does not exist",
        "  if (err.code === 'P2025') {",
        "    err = new AppError('Record not found', 404);",
        "  }",
        "  err.statusCode = err.statusCode || 500;",
        "  err.status = err.status || 'error';",
        "",
        "  if (err.isOperational || process.env.NODE_ENV === 'development') {",
        "    res.status(err.statusCode).json(errorResponse(err));",
        "    return;",
        "  }",
        "",
        "  console.error('ERROR', err);",
        "  res.status(500).json(errorResponse({ message: 'Something went very wrong!', status: 'error', statusCode: 500 }));",
        "};",
        "",
        "export { AppError, errorHandler, errorResponse };" if typed
        else "module.exports = { AppError, errorHandler, errorResponse };",
        "",
    ]
    return "\n".join(lines)


def prisma_client_file(language: str) -> str:
    if language == TYPESCRIPT:
        lines = [
            "import { PrismaClient } from '@prisma/client';",
            "",
            "declare global {",
            "  // This must be a `var` and not a `let / const`",
            "  var prisma: PrismaClient | undefined;",
            "}",
            "",
            "let prisma: PrismaClient;",
        ]
        export = "export default prisma;"
    else:
        lines = [
            "const { PrismaClient } = require('@prisma/client');",
            "",
            "let prisma;",
        ]
        export = "module.exports = prisma;"

    lines += [
        "",
        "if (process.env.NODE_ENV === 'production') {",
        "  prisma = new PrismaClient();",
        "} else {",
        "  if (!global.prisma) {",
        "    global.prisma = new PrismaClient();",
        "  }",
        "  prisma = global.prisma;",
        "}",
        "",
        export,
        "",
    ]
    return "\n".join(lines)


# prisma schema

def _prisma_default(data_type: str, raw: Optional[str]) -> Optional[str]:
    if raw is None or str(raw).strip() == "":
        return None
    raw = str(raw).strip()
    if data_type == LogicalType.NUMBER.value:
        return raw
    if data_type == LogicalType.BOOLEAN.value:
        return "true" if raw.lower() in ("true", "1", "yes") else "false"
    if data_type == LogicalType.STRING.value:
        return json.dumps(raw)
    return None


def prisma_field(column, id_type: str) -> str:
    if column.is_identifier:
        return f"{column.name} {PRISMA_ID_FIELDS.get(id_type, 'String @id')}"

    field_type = PRISMA_TYPES.get(column.data_type, "String")
    if column.is_nullable:
        field_type += "?"
    line = f"{column.name} {field_type}"

    default = _prisma_default(column.data_type, column.default_value)
    if default is not None:
        line += f" @default({default})"
    return line


def prisma_schema(dialect: str, tables) -> str:
    lines = [
        "datasource db {",
        f'  provider = "{dialect}"',
        '  url      = env("DATABASE_URL")',
        "}",
        "",
        "generator client {",
        '  provider = "prisma-client-js"',
        "}",
    ]
    for table in tables:
        lines += ["", f"model {model_name(table.name)} {{"]
        lines += [f"  {prisma_field(column, table.id_type)}" for column in table.columns]
        if model_name(table.name) != table.name:
            lines += ["", f'  @@map("{table.name}")']
        lines.append("}")
    lines.append("")
    return "\n".join(lines)


# project metadata

def package_name(project_name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", project_name.lower()).strip("-")
    return slug or "generated-backend"


def package_json(language: str, project_name: str, dialect: str) -> str:
    typed = language == TYPESCRIPT
    migrate = "prisma db push" if dialect == "mongodb" else "prisma migrate dev"

    dependencies = {
        "@prisma/client": "^5.22.0",
        "cors": "^2.8.5",
        "dotenv": "^16.4.5",
        "express": "^4.21.1",
    }
    dev_dependencies = {"nodemon": "^3.1.7", "prisma": "^5.22.0"}
    if typed:
        dev_dependencies.update({
            "@types/cors": "^2.8.17",
            "@types/express": "^4.17.21",
            "@types/node": "^22.9.0",
            "ts-node-dev": "^2.0.0",
            "typescript": "^5.6.3",
        })

    manifest = {
        "name": package_name(project_name),
        "version": "1.0.0",
        "description": "Generated backend project",
        "main": "dist/server.js" if typed else "server.js",
        "scripts": {
            "start": "node dist/server.js" if typed else "node server.js",
            "dev": "ts-node-dev --respawn --transpile-only server.ts" if typed else "nodemon server.js",
            "build": "tsc" if typed else "echo 'No build step for JavaScript'",
            "prisma:generate": "prisma generate",
            "prisma:migrate": migrate,
            "prisma:studio": "prisma studio",
            "setup": "npm install && npm run prisma:migrate && npm run prisma:generate && npm run dev",
        },
        "dependencies": dependencies,
        "devDependencies": dev_dependencies,
    }
    return json.dumps(manifest, indent=2) + "\n"


def tsconfig() -> str:
    config = {
        "compilerOptions": {
            "target": "es2019",
            "module": "commonjs",
            "outDir": "./dist",
            "rootDir": ".",
            "strict": True,
            "esModuleInterop": True,
            "skipLibCheck": True,
        },
        "include": ["**/*.ts"],
        "exclude": ["node_modules", "dist"],
    }
    return json.dumps(config, indent=2) + "\n"


def env_file(values: Dict[str, str]) -> str:
    return "\n".join(f"{key}={value}" for key, value in values.items()) + "\n"


def env_example(values: Dict[str, str]) -> str:
    return env_file({key: "your_value_here" for key in values})


def gitignore() -> str:
    lines = [
        "# Dependency directories",
        "node_modules/",
        "",
        "# Built output",
        "dist/",
        "build/",
        "",
        "# Logs",
        "logs",
        "*.log",
        "npm-debug.log*",
        "yarn-debug.log*",
        "yarn-error.log*",
        "",
        "# Environment variables",
        ".env",
        "",
        "# IDE specific files",
        ".vscode/",
        ".idea/",
        "*.swp",
        "*.swo",
        "",
        "# Operating System Files",
        ".DS_Store",
        "Thumbs.db",
        "",
    ]
    return "\n".join(lines)


def readme(project_name: str, dialect: str, tables) -> str:
    migrate_note = (
        "Push the Prisma schema to your database"
        if dialect == "mongodb" else "Run Prisma migrations to set up your database schema"
    )
    lines = [
        f"# {project_name} Backend",
        "",
        f"This is a generated backend project using Express.js and Prisma with a {dialect} database.",
        "",
        "## Setup Instructions",
        "",
        "1. **Install Dependencies**",
        "   ```",
        "   npm install",
        "   ```",
        "",
        "2. **Environment Setup**",
        "   - Copy `.env.example` to `.env` and set `DATABASE_URL` to your database connection string.",
        "     ```",
        "     cp .env.example .env",
        "     ```",
        "",
        "3. **Database Setup**",
        f"   - Make sure your {dialect} database is running and accessible.",
        f"   - {migrate_note}:",
        "     ```",
        "     npm run prisma:migrate",
        "     ```",
        "",
        "4. **Generate Prisma Client**",
        "   ```",
        "   npm run prisma:generate",
        "   ```",
        "",
        "5. **Start the Server**",
        "   - For development: `npm run dev`",
        "   - For production: `npm run build && npm start`",
        "",
        "## Available Scripts",
        "",
        "- `npm run dev`: Starts the server in development mode with hot-reloading.",
        "- `npm run build`: Builds the project for production.",
        "- `npm start`: Starts the server in production mode.",
        "- `npm run prisma:generate`: Generates the Prisma client.",
        "- `npm run prisma:migrate`: Applies the Prisma schema to the database.",
        "- `npm run setup`: Installs, migrates, generates and starts in one step.",
        "",
        "## API Endpoints",
        "",
        "| Name | Method | Path |",
        "| --- | --- | --- |",
    ]
    for table in tables:
        for endpoint in table.endpoints:
            path = "/api" + endpoint.path.replace(ID_PLACEHOLDER, ":id")
            lines.append(f"| {endpoint.name} | {endpoint.method} | `{path}` |")
    lines += [
        "",
        "## Error Handling",
        "",
        "Controllers forward errors to the middleware in `middleware/errorHandler`. "
        "Throw operational errors like this:",
        "",
        "```javascript",
        "throw new AppError('Your error message', statusCode);",
        "```",
        "",
    ]
    return "\n".join(lines)
